"""
Base classes for filter and validator processing units.

Filters transform a value (``process(value) -> value``); validators judge a
value (``is_valid(value) -> bool``) and report keyed messages for the last
call through ``get_messages()``. Any object honouring these contracts can be
placed in a specification; the classes here only provide the shared
message-template handling for the built-in units.
"""

from abc import ABC, abstractmethod
from typing import Any


class AbstractFilter(ABC):
    """Base class for filters."""

    @abstractmethod
    def process(self, value: Any) -> Any:
        """Return the filtered value."""

    def __call__(self, value: Any) -> Any:
        return self.process(value)


class AbstractValidator(ABC):
    """
    Base class for validators with templated messages.

    Subclasses declare ``message_templates`` mapping a message key to a
    ``str.format`` template. Templates may reference ``{value}`` and any name
    returned by ``message_variables()``. Callers can override individual
    templates through the ``messages`` constructor argument.
    """

    message_templates: dict[str, str] = {}

    def __init__(self, messages: dict[str, str] | None = None):
        self._templates = {**self.message_templates, **(messages or {})}
        self._messages: dict[str, str] = {}

    def is_valid(self, value: Any) -> bool:
        """
        Validate a value, replacing messages from any previous call.

        Params:
            value: The (already filtered) value to validate

        Returns:
            True when the value passes, False otherwise
        """
        self._messages = {}
        return self._validate(value)

    @abstractmethod
    def _validate(self, value: Any) -> bool:
        """Validation logic; call ``_error`` for every failure."""

    def get_messages(self) -> dict[str, str]:
        """Return messages produced by the last ``is_valid`` call."""
        return dict(self._messages)

    def message_variables(self) -> dict[str, Any]:
        """Extra variables available to message templates."""
        return {}

    def set_message(self, key: str, template: str) -> None:
        """Override the template for a single message key."""
        if key not in self._templates:
            raise KeyError(
                f"{type(self).__name__} has no message key '{key}'. "
                f"Available keys: {sorted(self._templates)}"
            )
        self._templates[key] = template

    def _error(self, key: str, value: Any = None) -> bool:
        template = self._templates[key]
        self._messages[key] = template.format(value=value, **self.message_variables())
        return False
