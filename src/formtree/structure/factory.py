"""
Element registry.

Maps element type names to element classes and creates elements from spec
dicts such as ``{"name": "email", "type": "email", "options": {...}}``.
Nested containers can list their children under ``elements``.
"""

from collections.abc import Mapping
from typing import Any

from inflection import underscore

from formtree.exceptions import InvalidSpecificationError, ServiceNotFoundError
from formtree.structure.element import (
    CheckboxElement,
    Element,
    EmailElement,
    FileElement,
    NumberElement,
    SelectElement,
)
from formtree.structure.fieldset import Fieldset
from formtree.structure.form import Form

_SPEC_KEYS = frozenset({"name", "type", "options", "attributes", "elements"})


class ElementRegistry:
    """Registry of element classes keyed by type name."""

    defaults: dict[str, type[Element]] = {
        "element": Element,
        "text": Element,
        "textarea": Element,
        "hidden": Element,
        "password": Element,
        "email": EmailElement,
        "number": NumberElement,
        "checkbox": CheckboxElement,
        "select": SelectElement,
        "radio": SelectElement,
        "multi_checkbox": SelectElement,
        "file": FileElement,
        "fieldset": Fieldset,
        "form": Form,
    }

    def __init__(self, element_classes: dict[str, type[Element]] | None = None):
        self._classes: dict[str, type[Element]] = {}
        for type_name, element_class in {
            **self.defaults,
            **(element_classes or {}),
        }.items():
            self.register(type_name, element_class)

    @staticmethod
    def _key(type_name: str) -> str:
        return underscore(type_name.strip()).replace("-", "_")

    def register(self, type_name: str, element_class: type[Element]) -> None:
        self._classes[self._key(type_name)] = element_class

    def has(self, type_name: str) -> bool:
        return self._key(type_name) in self._classes

    def get_class(self, type_name: str | type[Element]) -> type[Element]:
        """
        Resolve a type name (or pass through an Element subclass).

        Raises:
            ServiceNotFoundError: If the type name is not registered
        """
        if isinstance(type_name, type) and issubclass(type_name, Element):
            return type_name
        key = self._key(type_name)
        if key not in self._classes:
            raise ServiceNotFoundError(type_name, sorted(self._classes))
        return self._classes[key]

    def create(self, spec: Mapping[str, Any]) -> Element:
        """
        Create an element (or container with children) from a spec dict.

        Params:
            spec: Element spec with optional ``name``, ``type`` (default
                "element"), ``options``, ``attributes`` and, for containers,
                ``elements`` (list of child specs)

        Returns:
            The created element

        Raises:
            InvalidSpecificationError: If the spec has unknown keys
            ServiceNotFoundError: If the type is unknown
        """
        unknown = set(spec) - _SPEC_KEYS
        name = spec.get("name")
        if unknown:
            raise InvalidSpecificationError(
                name or "<unnamed>", f"unknown element keys: {', '.join(sorted(unknown))}"
            )
        element_class = self.get_class(spec.get("type") or "element")
        if issubclass(element_class, Fieldset):
            element = element_class(
                name,
                options=spec.get("options"),
                attributes=spec.get("attributes"),
                element_registry=self,
            )
            for child_spec in spec.get("elements") or []:
                element.add(child_spec)
            return element
        if spec.get("elements"):
            raise InvalidSpecificationError(
                name or "<unnamed>", "only containers can declare 'elements'"
            )
        return element_class(
            name, options=spec.get("options"), attributes=spec.get("attributes")
        )
