"""
Name-based registries for processing units.

Specification literals reference filters and validators by name
(``{"name": "StringLength", "options": {"min": 3}}``). Registries map those
names to factories. Names are normalised with ``inflection.underscore`` so
``StringLength``, ``stringLength`` and ``string_length`` resolve alike.
"""

from collections.abc import Callable
from typing import Any

from inflection import underscore

from formtree.exceptions import ServiceNotFoundError
from formtree.processing import filters, validators


def normalize_unit_name(name: str) -> str:
    """Canonical registry key for a unit name."""
    return underscore(name.strip()).replace("-", "_")


class UnitRegistry:
    """Registry of processing unit factories keyed by normalised name.

    Factories are usually the unit classes themselves; they are called with
    the reference's ``options`` as keyword arguments.
    """

    kind = "unit"
    defaults: dict[str, Callable[..., Any]] = {}

    def __init__(self, factories: dict[str, Callable[..., Any]] | None = None):
        self._factories: dict[str, Callable[..., Any]] = {}
        for name, factory in {**self.defaults, **(factories or {})}.items():
            self.register(name, factory)

    def register(self, name: str, factory: Callable[..., Any]) -> None:
        """Register or replace a factory under the given name."""
        self._factories[normalize_unit_name(name)] = factory

    def has(self, name: str) -> bool:
        return normalize_unit_name(name) in self._factories

    def names(self) -> list[str]:
        return sorted(self._factories)

    def get(self, name: str, options: dict[str, Any] | None = None) -> Any:
        """
        Create a unit instance.

        Params:
            name: Registered unit name in any supported spelling
            options: Keyword arguments for the unit factory

        Returns:
            A new unit instance

        Raises:
            ServiceNotFoundError: If no factory is registered under name
        """
        key = normalize_unit_name(name)
        if key not in self._factories:
            raise ServiceNotFoundError(name, self.names())
        return self._factories[key](**(options or {}))


class FilterRegistry(UnitRegistry):
    kind = "filter"
    defaults = {
        "StringTrim": filters.StringTrim,
        "StringToLower": filters.StringToLower,
        "StringToUpper": filters.StringToUpper,
        "StripTags": filters.StripTags,
        "ToInt": filters.ToInt,
        "ToFloat": filters.ToFloat,
        "ToNull": filters.ToNull,
        "Boolean": filters.Boolean,
        "Callback": filters.Callback,
    }


class ValidatorRegistry(UnitRegistry):
    kind = "validator"
    defaults = {
        "NotEmpty": validators.NotEmpty,
        "StringLength": validators.StringLength,
        "EmailAddress": validators.EmailAddress,
        "Regex": validators.Regex,
        "Digits": validators.Digits,
        "Between": validators.Between,
        "InArray": validators.InArray,
        "Callback": validators.Callback,
        "UploadFile": validators.UploadFile,
    }
