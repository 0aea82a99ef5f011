"""Built-in filters."""

import re
from collections.abc import Callable
from typing import Any

from formtree.processing.base import AbstractFilter

_TAG_PATTERN = re.compile(r"<[^>]*>")
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


class StringTrim(AbstractFilter):
    """Strip leading and trailing characters (whitespace by default)."""

    def __init__(self, charlist: str | None = None):
        self.charlist = charlist

    def process(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        return value.strip(self.charlist)


class StringToLower(AbstractFilter):
    def process(self, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class StringToUpper(AbstractFilter):
    def process(self, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class StripTags(AbstractFilter):
    """Remove anything that looks like a markup tag."""

    def process(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        return _TAG_PATTERN.sub("", value)


class ToInt(AbstractFilter):
    """Cast integer-like strings and floats to int; leave anything else alone."""

    def process(self, value: Any) -> Any:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str) and _INT_PATTERN.match(value.strip()):
            return int(value.strip())
        return value


class ToFloat(AbstractFilter):
    """Cast numeric strings and ints to float; leave anything else alone."""

    def process(self, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return float(value)
        if isinstance(value, str) and _FLOAT_PATTERN.match(value.strip()):
            return float(value.strip())
        return value


class ToNull(AbstractFilter):
    """Turn empty strings and empty lists into None."""

    def process(self, value: Any) -> Any:
        if value == "" or value == []:
            return None
        return value


class Boolean(AbstractFilter):
    """Map common truthy/falsy representations to bool."""

    TRUE_VALUES = frozenset({"1", "true", "on", "yes", "y"})
    FALSE_VALUES = frozenset({"0", "false", "off", "no", "n", ""})

    def process(self, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in self.TRUE_VALUES:
                return True
            if lowered in self.FALSE_VALUES:
                return False
        return value


class Callback(AbstractFilter):
    """Delegate to an arbitrary callable."""

    def __init__(self, callback: Callable[[Any], Any]):
        self.callback = callback

    def process(self, value: Any) -> Any:
        return self.callback(value)
