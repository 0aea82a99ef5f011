"""
formtree - Composable form trees with specification-driven validation

formtree builds trees of named elements, compiles one validation engine from
explicit specifications and the elements' own hints, binds the tree to
domain objects, and can derive the whole tree from annotated pydantic models.
"""

from importlib.metadata import version

from formtree.annotation import BuilderAbstractFactory
from formtree.binding import BindMode, DataMode
from formtree.structure import Element, Fieldset, Form
from formtree.validation import InputFilter, ValidationResult

__version__ = version("formtree")

__all__ = [
    "__version__",
    "Element",
    "Fieldset",
    "Form",
    "InputFilter",
    "ValidationResult",
    "BindMode",
    "DataMode",
    "BuilderAbstractFactory",
]
