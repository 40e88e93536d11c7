"""
Schema definitions using Pandera for data validation.

Configuration kept as tables is validated here before it reaches the loader.
"""

from bronzeload.schemas.load_config import LoadConfigSchema

__all__ = ["LoadConfigSchema"]
