"""
Element trees: leaf elements, fieldsets and forms.
"""

from formtree.structure.element import (
    VALIDATION_HINT_OPTION,
    CheckboxElement,
    Element,
    EmailElement,
    FileElement,
    NumberElement,
    SelectElement,
)
from formtree.structure.fieldset import Fieldset
from formtree.structure.form import Form
from formtree.structure.factory import ElementRegistry

__all__ = [
    "Element",
    "EmailElement",
    "NumberElement",
    "CheckboxElement",
    "SelectElement",
    "FileElement",
    "Fieldset",
    "Form",
    "ElementRegistry",
    "VALIDATION_HINT_OPTION",
]
