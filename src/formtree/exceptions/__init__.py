"""
formtree exception classes.

This package provides all exception types used throughout formtree for
consistent error handling and reporting.
"""

from formtree.exceptions.core import (
    AnnotationParseError,
    ConfigurationError,
    CyclicContainerError,
    DuplicateElementNameError,
    ElementOwnershipError,
    FormStateError,
    FormTreeError,
    IncompatibleRuntimeError,
    InvalidSpecificationError,
    ServiceNotCreatedError,
    ServiceNotFoundError,
    SpecificationTypeMismatch,
    TreeStructureError,
    UnknownFieldError,
    UnknownProcessingUnitError,
    UnsupportedObjectError,
)

__all__ = [
    "FormTreeError",
    "TreeStructureError",
    "DuplicateElementNameError",
    "CyclicContainerError",
    "ElementOwnershipError",
    "InvalidSpecificationError",
    "SpecificationTypeMismatch",
    "UnknownProcessingUnitError",
    "UnknownFieldError",
    "FormStateError",
    "UnsupportedObjectError",
    "AnnotationParseError",
    "ConfigurationError",
    "IncompatibleRuntimeError",
    "ServiceNotFoundError",
    "ServiceNotCreatedError",
]
