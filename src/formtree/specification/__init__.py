"""
Specification records and the specification merger.

This package provides the immutable records compiled from explicit literals
and node hints, and ``compile_specification`` which merges them for a tree.
"""

from formtree.specification.merger import compile_specification
from formtree.specification.records import (
    ARRAY_INPUT_TYPE,
    FILE_INPUT_TYPE,
    INPUT_FILTER_TYPE,
    INPUT_TYPE,
    ContainerSpecification,
    InputSpecification,
    UnitReference,
)

__all__ = [
    "compile_specification",
    "ContainerSpecification",
    "InputSpecification",
    "UnitReference",
    "INPUT_TYPE",
    "ARRAY_INPUT_TYPE",
    "FILE_INPUT_TYPE",
    "INPUT_FILTER_TYPE",
]
