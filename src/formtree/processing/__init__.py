"""
Filter and validator processing units.

This package provides the processing unit contracts, a set of built-in
filters and validators, and the name-based registries used when compiling
specification literals.
"""

from formtree.processing.base import AbstractFilter, AbstractValidator
from formtree.processing.registry import (
    FilterRegistry,
    UnitRegistry,
    ValidatorRegistry,
    normalize_unit_name,
)

__all__ = [
    "AbstractFilter",
    "AbstractValidator",
    "UnitRegistry",
    "FilterRegistry",
    "ValidatorRegistry",
    "normalize_unit_name",
]
