"""
The validation engine.

An ``InputFilter`` is an ordered collection of inputs and nested input
filters compiled from a specification. It validates nested data, optionally
restricted to a validation group, and keeps raw and filtered values apart.
"""

from collections.abc import Iterator, Mapping
from copy import deepcopy
from typing import Any

from formtree.core.path_utils import get_nested, join_path, split_path_components
from formtree.core.types import NestedValues, ValidationGroupSelector
from formtree.exceptions import FormStateError
from formtree.validation.groups import NormalizedGroup, normalize_validation_group
from formtree.validation.input import Input
from formtree.validation.result import FieldResult, ValidationResult


class InputFilter:
    """
    Validation engine for a container and its descendants.

    Params:
        name: Name of the container this engine validates
    """

    is_input_filter = True

    def __init__(self, name: str | None = None):
        self.name = name
        self._inputs: dict[str, "Input | InputFilter"] = {}
        self._data: NestedValues | None = None
        self._validation_group: NormalizedGroup | None = None
        self._result: ValidationResult | None = None

    def __repr__(self) -> str:
        return f"InputFilter(name={self.name!r}, inputs={list(self._inputs)})"

    # Composition

    def add(self, input_or_filter: "Input | InputFilter", name: str | None = None) -> None:
        """Add an input or nested input filter; an existing name is replaced."""
        key = name or input_or_filter.name
        if not key:
            raise ValueError("Inputs added to an InputFilter need a name")
        self._inputs[key] = input_or_filter

    def has(self, name: str) -> bool:
        return name in self._inputs

    def get(self, name: str) -> "Input | InputFilter":
        """
        Get an input or nested filter by name or dotted path.

        Raises:
            KeyError: If nothing is compiled at that path
        """
        node: Input | InputFilter = self
        for part in split_path_components(name):
            if not isinstance(node, InputFilter) or part not in node._inputs:
                raise KeyError(f"No input '{name}' in input filter '{self.name}'")
            node = node._inputs[part]
        return node

    def remove(self, name: str) -> None:
        self._inputs.pop(name, None)

    def __iter__(self) -> Iterator[str]:
        return iter(self._inputs)

    def __len__(self) -> int:
        return len(self._inputs)

    def paths(self, prefix: tuple[str, ...] = ()) -> list[str]:
        """All leaf paths, depth-first."""
        collected: list[str] = []
        for name, node in self._inputs.items():
            if isinstance(node, InputFilter):
                collected.extend(node.paths((*prefix, name)))
            else:
                collected.append(join_path(prefix, name))
        return collected

    # Validation groups

    def set_validation_group(self, selector: ValidationGroupSelector) -> None:
        """
        Restrict validation to a subset of fields.

        Raises:
            UnknownFieldError: If the selector names a path that is not compiled;
                the previous group stays in effect
        """
        self._validation_group = normalize_validation_group(self, selector)

    def set_validate_all(self) -> None:
        self._validation_group = None

    @property
    def validation_group(self) -> NormalizedGroup | None:
        return deepcopy(self._validation_group)

    # Data

    def set_data(self, data: Mapping[str, Any] | None) -> None:
        """Distribute nested data to the inputs; absent names are reset."""
        data = dict(data or {})
        self._data = data
        self._result = None
        for name, node in self._inputs.items():
            if isinstance(node, InputFilter):
                nested = data.get(name)
                node.set_data(nested if isinstance(nested, Mapping) else {})
            elif name in data:
                node.set_value(data[name])
            else:
                node.reset_value()

    def get_raw_values(self) -> dict[str, Any]:
        """The submitted data, never filtered."""
        if self._data is None:
            raise FormStateError(self.name, "no data has been set")
        return deepcopy(self._data)

    def get_raw_value(self, path: str) -> Any:
        node = self.get(path)
        if isinstance(node, InputFilter):
            return node.get_raw_values()
        return node.raw_value

    # Running

    def validate(
        self, data: Mapping[str, Any], active_group: ValidationGroupSelector | None = None
    ) -> ValidationResult:
        """
        Validate data and return the structured result.

        Params:
            data: Nested data keyed by field and container names
            active_group: Selector used for this call only; defaults to the
                group set with ``set_validation_group``

        Returns:
            ValidationResult; data problems never raise
        """
        self.set_data(data)
        group = self._validation_group
        if active_group is not None:
            group = normalize_validation_group(self, active_group)
        return self._validate_current(group)

    def is_valid(self) -> bool:
        """Validate the data set with ``set_data`` against the current group."""
        if self._data is None:
            raise FormStateError(self.name, "no data has been set")
        return self._validate_current(self._validation_group).is_valid

    def _validate_current(self, group: NormalizedGroup | None) -> ValidationResult:
        fields: dict[str, FieldResult] = {}
        values: dict[str, Any] = {}
        messages: dict[str, Any] = {}
        self._collect(group, (), fields, values, messages)
        self._result = ValidationResult(
            fields=fields,
            values=values,
            raw_values=deepcopy(self._data or {}),
            messages=messages,
        )
        return self._result

    def _collect(
        self,
        group: NormalizedGroup | None,
        prefix: tuple[str, ...],
        fields: dict[str, FieldResult],
        values: dict[str, Any],
        messages: dict[str, Any],
    ) -> None:
        for name, node in self._inputs.items():
            if group is not None and name not in group:
                continue
            if isinstance(node, InputFilter):
                nested_values: dict[str, Any] = {}
                nested_messages: dict[str, Any] = {}
                node._collect(
                    group[name] if group is not None else None,
                    (*prefix, name),
                    fields,
                    nested_values,
                    nested_messages,
                )
                values[name] = nested_values
                if nested_messages:
                    messages[name] = nested_messages
                continue

            valid = node.is_valid()
            field_messages = node.get_messages()
            fields[join_path(prefix, name)] = FieldResult(
                path=join_path(prefix, name),
                is_valid=valid,
                messages=list(field_messages.values()),
                skipped=node.skipped,
            )
            if not node.skipped:
                values[name] = node.get_value()
            if field_messages:
                messages[name] = field_messages

    @property
    def result(self) -> ValidationResult | None:
        """Result of the last validation, None if data changed since."""
        return self._result

    def _require_result(self) -> ValidationResult:
        if self._result is None:
            raise FormStateError(self.name, "data has not been validated yet")
        return self._result

    def get_values(self) -> dict[str, Any]:
        """Filtered values of the last validation (active group only)."""
        return deepcopy(self._require_result().values)

    def get_value(self, path: str) -> Any:
        """Filtered value of one field from the last validation; None if skipped."""
        return get_nested(self._require_result().values, path)

    def get_messages(self) -> dict[str, Any]:
        return deepcopy(self._require_result().messages)

    def get_invalid_input(self) -> dict[str, FieldResult]:
        return {
            result.path: result
            for result in self._require_result().invalid_fields()
        }
