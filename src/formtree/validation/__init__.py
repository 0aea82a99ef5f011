"""
The validation engine.

This package provides the per-field inputs, the ``InputFilter`` engine,
validation group handling, results, and the factory building engines from
compiled specifications.
"""

from formtree.validation.factory import InputFilterFactory
from formtree.validation.groups import normalize_validation_group
from formtree.validation.input import ArrayInput, ChainEntry, FileInput, Input
from formtree.validation.input_filter import InputFilter
from formtree.validation.result import FieldResult, ValidationResult

__all__ = [
    "Input",
    "ArrayInput",
    "FileInput",
    "ChainEntry",
    "InputFilter",
    "InputFilterFactory",
    "FieldResult",
    "ValidationResult",
    "normalize_validation_group",
]
