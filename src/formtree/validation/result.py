"""Validation results."""

from typing import Any

from attrs import field, frozen

from formtree.core.path_utils import join_path, split_path_components


@frozen
class FieldResult:
    """Outcome for one field of a validation pass."""

    path: str
    is_valid: bool
    messages: list[str] = field(factory=list)
    skipped: bool = False


@frozen
class ValidationResult:
    """
    Outcome of one validation pass over the active group.

    Attributes:
        fields: Per-field results keyed by dotted path, in traversal order
        values: Filtered values as nested dicts; skipped fields are absent
        raw_values: The submitted data, unfiltered
        messages: Nested dicts of ``{message_key: message}`` for invalid fields
    """

    fields: dict[str, FieldResult] = field(factory=dict)
    values: dict[str, Any] = field(factory=dict)
    raw_values: dict[str, Any] = field(factory=dict)
    messages: dict[str, Any] = field(factory=dict)

    @property
    def is_valid(self) -> bool:
        return all(result.is_valid for result in self.fields.values())

    def get_field(self, path: str) -> FieldResult:
        """
        Result for a dotted or bracket path.

        Raises:
            KeyError: If the path was not part of this validation pass
        """
        key = join_path(split_path_components(path))
        if key not in self.fields:
            raise KeyError(f"Field '{path}' was not validated in this pass")
        return self.fields[key]

    def invalid_fields(self) -> list[FieldResult]:
        return [result for result in self.fields.values() if not result.is_valid]

    def validated_paths(self) -> list[str]:
        return list(self.fields)
