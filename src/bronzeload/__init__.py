"""
Bronzeload: configuration-driven bronze layer ingestion.

This package truncates staging tables and bulk-loads raw delimited
source files into them, one configured table at a time.
"""

from importlib.metadata import version

__version__ = version("bronzeload")

__all__ = ["__version__"]
