"""
Per-field processing units of the validation engine.

An ``Input`` holds a raw value and runs its filter chain, then its validator
chain. Empty values short-circuit according to the ``required``,
``allow_empty`` and ``continue_if_empty`` flags.
"""

from collections.abc import Iterable
from typing import Any

from attrs import frozen

from formtree.processing.validators import (
    UPLOAD_ERR_NO_FILE,
    NotEmpty,
    UploadFile,
)

IS_EMPTY = NotEmpty.IS_EMPTY
_UNFILTERED = object()
ERROR_MESSAGE_KEY = "errorMessage"


@frozen
class ChainEntry:
    """A validator together with its own break-chain flag."""

    unit: Any
    break_chain_on_failure: bool = False


class Input:
    """
    Validation unit for a single scalar field.

    Params:
        name: Field name
        required: Empty values fail when True
        filters: Filter units applied left to right
        validators: Validator units or ``ChainEntry`` objects, run left to right
        continue_if_empty: Run the chains even for empty values
        allow_empty: Accept empty values even when required
        break_on_failure: Stop the validator chain at the first failure
        error_message: Single message replacing all validator messages
    """

    is_input_filter = False

    def __init__(
        self,
        name: str,
        required: bool = False,
        filters: Iterable[Any] = (),
        validators: Iterable[Any] = (),
        continue_if_empty: bool = False,
        allow_empty: bool = False,
        break_on_failure: bool = False,
        error_message: str | None = None,
    ):
        self.name = name
        self.required = required
        self.filters = list(filters)
        self.validators = [
            v if isinstance(v, ChainEntry) else ChainEntry(v) for v in validators
        ]
        self.continue_if_empty = continue_if_empty
        self.allow_empty = allow_empty
        self.break_on_failure = break_on_failure
        self.error_message = error_message
        self._raw_value: Any = None
        self._has_value = False
        self._messages: dict[str, str] = {}
        self._skipped = False
        self._filtered: Any = _UNFILTERED

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, required={self.required})"

    def set_value(self, value: Any) -> None:
        self._raw_value = value
        self._has_value = True
        self._filtered = _UNFILTERED

    def reset_value(self) -> None:
        self._raw_value = None
        self._has_value = False
        self._filtered = _UNFILTERED

    @property
    def has_value(self) -> bool:
        return self._has_value

    @property
    def raw_value(self) -> Any:
        return self._raw_value

    @property
    def skipped(self) -> bool:
        """True when the last validation accepted an empty value without processing."""
        return self._skipped

    def get_value(self) -> Any:
        """Filtered value; after validation, the value the validators saw."""
        if self._filtered is not _UNFILTERED:
            return self._filtered
        return self._filter(self._raw_value)

    def _filter(self, value: Any) -> Any:
        for unit in self.filters:
            value = unit.process(value)
        return value

    def is_empty_value(self, value: Any) -> bool:
        return value is None or value == "" or value == []

    def _empty_outcome(self, value: Any) -> bool | None:
        """Result for an empty value, or None when the chains must run."""
        if not self.is_empty_value(value) or self.continue_if_empty:
            return None
        if not self.required or self.allow_empty:
            self._skipped = True
            return True
        self._messages = {
            IS_EMPTY: self.error_message or NotEmpty.message_templates[IS_EMPTY]
        }
        return False

    def get_messages(self) -> dict[str, str]:
        return dict(self._messages)

    def is_valid(self) -> bool:
        """
        Validate the current raw value.

        Returns:
            True when the value is acceptable; messages are kept otherwise
        """
        self._messages = {}
        self._skipped = False
        self._filtered = _UNFILTERED
        value = self._raw_value if self._has_value else None

        outcome = self._empty_outcome(value)
        if outcome is not None:
            return outcome

        self._filtered = self._filter(self._raw_value)
        return self._run_validators(self._filtered)

    def _run_validators(self, value: Any) -> bool:
        valid = True
        for entry in self.validators:
            if entry.unit.is_valid(value):
                continue
            valid = False
            self._messages.update(entry.unit.get_messages())
            if self.break_on_failure or entry.break_chain_on_failure:
                break
        if not valid and self.error_message:
            self._messages = {ERROR_MESSAGE_KEY: self.error_message}
        return valid


class ArrayInput(Input):
    """Validation unit for list values; the chains run once per item."""

    NOT_ARRAY = "arrayInvalid"

    def get_value(self) -> Any:
        if self._filtered is not _UNFILTERED:
            return self._filtered
        if not isinstance(self._raw_value, list):
            return self._raw_value
        return [self._filter(item) for item in self._raw_value]

    def is_valid(self) -> bool:
        self._messages = {}
        self._skipped = False
        self._filtered = _UNFILTERED
        value = self._raw_value if self._has_value else None

        outcome = self._empty_outcome(value)
        if outcome is not None:
            return outcome

        if not isinstance(value, list):
            self._messages = {
                self.NOT_ARRAY: self.error_message or "Value must be a list"
            }
            return False

        self._filtered = [self._filter(item) for item in value]
        valid = True
        for item in self._filtered:
            if not self._run_validators(item):
                valid = False
                if self.break_on_failure:
                    break
        return valid


class FileInput(Input):
    """
    Validation unit for uploads.

    Validators run against the raw upload descriptor; filters (for example
    a rename) only apply once validation succeeded. An ``UploadFile``
    validator is prepended unless one is configured already.
    """

    def __init__(
        self,
        name: str,
        required: bool = False,
        filters: Iterable[Any] = (),
        validators: Iterable[Any] = (),
        continue_if_empty: bool = False,
        allow_empty: bool = False,
        break_on_failure: bool = False,
        error_message: str | None = None,
        auto_prepend_upload_validator: bool = True,
    ):
        super().__init__(
            name,
            required=required,
            filters=filters,
            validators=validators,
            continue_if_empty=continue_if_empty,
            allow_empty=allow_empty,
            break_on_failure=break_on_failure,
            error_message=error_message,
        )
        self._validated = False
        if auto_prepend_upload_validator and not any(
            isinstance(entry.unit, UploadFile) for entry in self.validators
        ):
            self.validators.insert(0, ChainEntry(UploadFile(), True))

    def set_value(self, value: Any) -> None:
        super().set_value(value)
        self._validated = False

    def is_empty_value(self, value: Any) -> bool:
        if isinstance(value, dict):
            return value.get("error") == UPLOAD_ERR_NO_FILE
        return super().is_empty_value(value)

    def get_value(self) -> Any:
        if self._filtered is not _UNFILTERED:
            return self._filtered
        if not self._validated:
            return self._raw_value
        return self._filter(self._raw_value)

    def is_valid(self) -> bool:
        self._validated = False
        self._messages = {}
        self._skipped = False
        self._filtered = _UNFILTERED
        value = self._raw_value if self._has_value else None

        outcome = self._empty_outcome(value)
        if outcome is not None:
            return outcome

        self._validated = self._run_validators(value)
        if self._validated:
            self._filtered = self._filter(self._raw_value)
        return self._validated
