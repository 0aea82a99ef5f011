"""Built-in validators."""

import re
from collections.abc import Callable, Iterable
from typing import Any

from formtree.processing.base import AbstractValidator

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s.]+(\.[^@\s.]+)+$")
_DIGITS_PATTERN = re.compile(r"^\d+$")

UPLOAD_ERR_OK = 0
UPLOAD_ERR_NO_FILE = 4


class NotEmpty(AbstractValidator):
    IS_EMPTY = "isEmpty"

    message_templates = {IS_EMPTY: "Value is required and can't be empty"}

    def _validate(self, value: Any) -> bool:
        if value is None or value == "" or value == [] or value == {}:
            return self._error(self.IS_EMPTY, value)
        return True


class StringLength(AbstractValidator):
    INVALID = "stringLengthInvalid"
    TOO_SHORT = "stringLengthTooShort"
    TOO_LONG = "stringLengthTooLong"

    message_templates = {
        INVALID: "Invalid type given. String expected",
        TOO_SHORT: "The input is less than {min} characters long",
        TOO_LONG: "The input is more than {max} characters long",
    }

    def __init__(
        self,
        min: int = 0,
        max: int | None = None,
        messages: dict[str, str] | None = None,
    ):
        super().__init__(messages)
        if max is not None and max < min:
            raise ValueError(
                f"StringLength max ({max}) must be greater than or equal to min ({min})"
            )
        self.min = min
        self.max = max

    def message_variables(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max}

    def _validate(self, value: Any) -> bool:
        if not isinstance(value, str):
            return self._error(self.INVALID, value)
        valid = True
        if len(value) < self.min:
            valid = self._error(self.TOO_SHORT, value)
        if self.max is not None and len(value) > self.max:
            valid = self._error(self.TOO_LONG, value)
        return valid


class EmailAddress(AbstractValidator):
    INVALID = "emailAddressInvalid"
    INVALID_FORMAT = "emailAddressInvalidFormat"

    message_templates = {
        INVALID: "Invalid type given. String expected",
        INVALID_FORMAT: "The input is not a valid email address. Use the basic format local-part@hostname",
    }

    def _validate(self, value: Any) -> bool:
        if not isinstance(value, str):
            return self._error(self.INVALID, value)
        if not _EMAIL_PATTERN.match(value):
            return self._error(self.INVALID_FORMAT, value)
        return True


class Regex(AbstractValidator):
    INVALID = "regexInvalid"
    NOT_MATCH = "regexNotMatch"

    message_templates = {
        INVALID: "Invalid type given. String, integer or float expected",
        NOT_MATCH: "The input does not match against pattern '{pattern}'",
    }

    def __init__(self, pattern: str, messages: dict[str, str] | None = None):
        super().__init__(messages)
        self.pattern = pattern
        self._compiled = re.compile(pattern)

    def message_variables(self) -> dict[str, Any]:
        return {"pattern": self.pattern}

    def _validate(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, str | int | float):
            return self._error(self.INVALID, value)
        if not self._compiled.search(str(value)):
            return self._error(self.NOT_MATCH, value)
        return True


class Digits(AbstractValidator):
    NOT_DIGITS = "notDigits"
    INVALID = "digitsInvalid"

    message_templates = {
        NOT_DIGITS: "The input must contain only digits",
        INVALID: "Invalid type given. String, integer or float expected",
    }

    def _validate(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, str | int | float):
            return self._error(self.INVALID, value)
        if not _DIGITS_PATTERN.match(str(value)):
            return self._error(self.NOT_DIGITS, value)
        return True


class Between(AbstractValidator):
    NOT_BETWEEN = "notBetween"
    NOT_BETWEEN_STRICT = "notBetweenStrict"
    VALUE_NOT_NUMERIC = "valueNotNumeric"

    message_templates = {
        NOT_BETWEEN: "The input is not between '{min}' and '{max}', inclusively",
        NOT_BETWEEN_STRICT: "The input is not strictly between '{min}' and '{max}'",
        VALUE_NOT_NUMERIC: "The input is not numeric",
    }

    def __init__(
        self,
        min: float,
        max: float,
        inclusive: bool = True,
        messages: dict[str, str] | None = None,
    ):
        super().__init__(messages)
        self.min = min
        self.max = max
        self.inclusive = inclusive

    def message_variables(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max}

    def _validate(self, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return self._error(self.VALUE_NOT_NUMERIC, value)
        if self.inclusive:
            if not self.min <= value <= self.max:
                return self._error(self.NOT_BETWEEN, value)
        elif not self.min < value < self.max:
            return self._error(self.NOT_BETWEEN_STRICT, value)
        return True


class InArray(AbstractValidator):
    NOT_IN_ARRAY = "notInArray"

    message_templates = {NOT_IN_ARRAY: "The input was not found in the haystack"}

    def __init__(
        self,
        haystack: Iterable[Any],
        strict: bool = False,
        messages: dict[str, str] | None = None,
    ):
        super().__init__(messages)
        self.haystack = list(haystack)
        self.strict = strict

    def _validate(self, value: Any) -> bool:
        if self.strict:
            found = any(
                type(value) is type(item) and value == item for item in self.haystack
            )
        else:
            found = any(str(value) == str(item) for item in self.haystack)
        if not found:
            return self._error(self.NOT_IN_ARRAY, value)
        return True


class Callback(AbstractValidator):
    INVALID_VALUE = "callbackValue"

    message_templates = {INVALID_VALUE: "The input is not valid"}

    def __init__(
        self,
        callback: Callable[[Any], bool],
        messages: dict[str, str] | None = None,
    ):
        super().__init__(messages)
        self.callback = callback

    def _validate(self, value: Any) -> bool:
        if not self.callback(value):
            return self._error(self.INVALID_VALUE, value)
        return True


class UploadFile(AbstractValidator):
    """Check an upload descriptor: a mapping with ``tmp_name`` and ``error``."""

    INVALID = "fileUploadFileErrorFileNotFound"
    ATTACK = "fileUploadFileErrorAttack"
    NO_FILE = "fileUploadFileErrorNoFile"

    message_templates = {
        INVALID: "File was not found",
        ATTACK: "File was illegally uploaded. This could be a possible attack",
        NO_FILE: "File was not uploaded",
    }

    def _validate(self, value: Any) -> bool:
        if not isinstance(value, dict):
            return self._error(self.INVALID, value)
        error = value.get("error", UPLOAD_ERR_OK)
        if error == UPLOAD_ERR_NO_FILE:
            return self._error(self.NO_FILE, value)
        if error != UPLOAD_ERR_OK:
            return self._error(self.ATTACK, value)
        if not value.get("tmp_name"):
            return self._error(self.INVALID, value)
        return True
