"""
Leaf input nodes.

An ``Element`` is a named input unit carrying attributes, options and a
value. Elements that know how they should be validated expose a hint through
``get_input_specification()``; the specification merger consumes these hints
when no explicit record exists for the element's path.
"""

from typing import TYPE_CHECKING, Any

from formtree.exceptions import TreeStructureError
from formtree.specification.records import (
    ARRAY_INPUT_TYPE,
    FILE_INPUT_TYPE,
    INPUT_TYPE,
)

if TYPE_CHECKING:
    from formtree.structure.fieldset import Fieldset

VALIDATION_HINT_OPTION = "validation_hint"


class Element:
    """
    Leaf input node.

    Params:
        name: Element name, unique within its parent container
        options: Option map; ``label`` and ``validation_hint`` are recognized
        attributes: Attribute map (insertion ordered)
    """

    is_container = False
    accepted_input_types: frozenset[str] = frozenset({INPUT_TYPE, ARRAY_INPUT_TYPE})

    def __init__(
        self,
        name: str | None = None,
        options: dict[str, Any] | None = None,
        attributes: dict[str, Any] | None = None,
    ):
        self._name = name
        self._options: dict[str, Any] = {}
        self._attributes: dict[str, Any] = {}
        self._label: str | None = None
        self._value: Any = None
        self._parent: "Fieldset | None" = None
        if options:
            self.set_options(options)
        if attributes:
            self.set_attributes(attributes)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        if self._parent is not None:
            raise TreeStructureError(
                f"Cannot rename '{self._name}' while it belongs to '{self._parent.name}'"
            )
        self._name = name

    @property
    def parent(self) -> "Fieldset | None":
        return self._parent

    @property
    def label(self) -> str | None:
        return self._label

    @label.setter
    def label(self, label: str | None) -> None:
        self._label = label

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self._value = value

    # Options

    def set_options(self, options: dict[str, Any]) -> None:
        """Merge options into the element; ``label`` also sets the label."""
        for key, value in options.items():
            self.set_option(key, value)

    def set_option(self, key: str, value: Any) -> None:
        if key == "label":
            self._label = value
        self._options[key] = value

    def get_option(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)

    def get_options(self) -> dict[str, Any]:
        return dict(self._options)

    # Attributes

    def set_attributes(self, attributes: dict[str, Any]) -> None:
        for key, value in attributes.items():
            self.set_attribute(key, value)

    def set_attribute(self, key: str, value: Any) -> None:
        self._attributes[key] = value

    def get_attribute(self, key: str, default: Any = None) -> Any:
        return self._attributes.get(key, default)

    def has_attribute(self, key: str) -> bool:
        return key in self._attributes

    def remove_attribute(self, key: str) -> None:
        self._attributes.pop(key, None)

    def get_attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    # Validation hints

    def default_input_specification(self) -> dict[str, Any] | None:
        """Hint the element kind provides on its own; None for plain elements."""
        return None

    def get_input_specification(self) -> dict[str, Any] | None:
        """
        Validation hint for this element.

        The kind's default hint is overlaid (shallowly) by the
        ``validation_hint`` option.

        Returns:
            A specification record literal, or None when the element has no hint
        """
        default = self.default_input_specification()
        hint = self._options.get(VALIDATION_HINT_OPTION)
        if default is None and not hint:
            return None
        return {**(default or {}), **(hint or {})}

    def accepts_input_type(self, input_type: str) -> bool:
        """Whether a processing type can validate this element's values."""
        return input_type in self.accepted_input_types


class EmailElement(Element):
    """Single email address input."""

    def default_input_specification(self) -> dict[str, Any]:
        return {
            "required": True,
            "filters": [{"name": "StringTrim"}],
            "validators": [{"name": "EmailAddress"}],
        }


class NumberElement(Element):
    """Numeric input; ``min``/``max`` attributes add a range check."""

    NUMBER_PATTERN = r"^-?\d*(\.\d+)?$"

    def default_input_specification(self) -> dict[str, Any]:
        validators: list[dict[str, Any]] = [
            {"name": "Regex", "options": {"pattern": self.NUMBER_PATTERN}}
        ]
        if self.has_attribute("min") and self.has_attribute("max"):
            validators.append(
                {
                    "name": "Between",
                    "options": {
                        "min": float(self.get_attribute("min")),
                        "max": float(self.get_attribute("max")),
                    },
                }
            )
        return {
            "required": True,
            "filters": [{"name": "StringTrim"}, {"name": "ToFloat"}],
            "validators": validators,
        }


class CheckboxElement(Element):
    """Single checkbox with configurable checked and unchecked values."""

    def __init__(
        self,
        name: str | None = None,
        options: dict[str, Any] | None = None,
        attributes: dict[str, Any] | None = None,
    ):
        super().__init__(name, None, attributes)
        self._options.update({"checked_value": "1", "unchecked_value": "0"})
        if options:
            self.set_options(options)

    @property
    def is_checked(self) -> bool:
        return str(self.value) == str(self.get_option("checked_value"))

    def default_input_specification(self) -> dict[str, Any]:
        return {
            "required": True,
            "validators": [
                {
                    "name": "InArray",
                    "options": {
                        "haystack": [
                            self.get_option("checked_value"),
                            self.get_option("unchecked_value"),
                        ]
                    },
                }
            ],
        }


class SelectElement(Element):
    """
    Choice among ``value_options``.

    ``value_options`` may be a list of values or a ``{value: label}`` map.
    The ``multiple`` attribute switches validation to the array input type.
    """

    def get_value_options(self) -> list[Any]:
        value_options = self.get_option("value_options") or []
        if isinstance(value_options, dict):
            return list(value_options)
        return list(value_options)

    def default_input_specification(self) -> dict[str, Any]:
        spec: dict[str, Any] = {"required": True}
        if not self.get_option("disable_inarray_validator", False):
            spec["validators"] = [
                {"name": "InArray", "options": {"haystack": self.get_value_options()}}
            ]
        if self.get_attribute("multiple"):
            spec["type"] = ARRAY_INPUT_TYPE
        return spec


class FileElement(Element):
    """Upload input; only the file processing type can validate it."""

    accepted_input_types = frozenset({FILE_INPUT_TYPE})

    def default_input_specification(self) -> dict[str, Any]:
        return {"type": FILE_INPUT_TYPE, "required": False}
