"""
Core formtree components.

This package provides the fundamental type definitions and path utilities
shared by the structure, validation and builder packages.
"""

from formtree.core.path_utils import (
    get_nested,
    join_path,
    set_nested,
    split_path_components,
)
from formtree.core.types import (
    NestedValues,
    SpecificationLiteral,
    ValidationGroupSelector,
)

__all__ = [
    "split_path_components",
    "join_path",
    "get_nested",
    "set_nested",
    "NestedValues",
    "SpecificationLiteral",
    "ValidationGroupSelector",
]
