"""Post-load validation module."""

from bronzeload.validation.core import Validator

__all__ = ["Validator"]
