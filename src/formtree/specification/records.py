"""
Specification records.

A compiled specification is a tree of immutable records mirroring the
container tree: ``ContainerSpecification`` for containers and
``InputSpecification`` for leaves. Records are produced from specification
literals (plain nested dicts) and can be turned back into literals.
"""

from collections.abc import Iterator, Mapping
from typing import Any, Union

from attrs import evolve, field, frozen

from formtree.core.path_utils import join_path, split_path_components
from formtree.exceptions import InvalidSpecificationError

INPUT_TYPE = "input"
ARRAY_INPUT_TYPE = "array"
FILE_INPUT_TYPE = "file"
INPUT_FILTER_TYPE = "input_filter"

# Literal key spellings accepted for each record attribute
_RECORD_KEYS = {
    "name": "name",
    "required": "required",
    "filters": "filters",
    "validators": "validators",
    "type": "type",
    "continue_if_empty": "continue_if_empty",
    "continueIfEmpty": "continue_if_empty",
    "allow_empty": "allow_empty",
    "allowEmpty": "allow_empty",
    "break_on_failure": "break_on_failure",
    "breakOnFailure": "break_on_failure",
    "error_message": "error_message",
    "errorMessage": "error_message",
}

_BOOLEAN_ATTRIBUTES = (
    "required",
    "continue_if_empty",
    "allow_empty",
    "break_on_failure",
)


@frozen
class UnitReference:
    """Reference to a registered filter or validator, resolved at engine build."""

    name: str
    options: dict[str, Any] = field(factory=dict, converter=dict)
    break_chain_on_failure: bool = False

    @classmethod
    def from_literal(cls, literal: Any, path: str, kind: str) -> Any:
        """
        Interpret one entry of a ``filters`` or ``validators`` list.

        Params:
            literal: ``{"name", "options", "break_chain_on_failure"}`` dict,
                a bare unit name, or a pre-built unit object
            path: Field path for error messages
            kind: Either "filter" or "validator"

        Returns:
            A UnitReference, or the pre-built unit unchanged

        Raises:
            InvalidSpecificationError: If the entry matches none of the forms
        """
        if isinstance(literal, UnitReference):
            return literal
        if isinstance(literal, str):
            return cls(name=literal)
        if isinstance(literal, Mapping):
            if "name" not in literal:
                raise InvalidSpecificationError(path, f"{kind} entry without 'name'")
            unknown = set(literal) - {"name", "options", "break_chain_on_failure"}
            if unknown:
                raise InvalidSpecificationError(
                    path, f"unknown {kind} keys: {', '.join(sorted(unknown))}"
                )
            return cls(
                name=literal["name"],
                options=literal.get("options") or {},
                break_chain_on_failure=bool(
                    literal.get("break_chain_on_failure", False)
                ),
            )
        method = "process" if kind == "filter" else "is_valid"
        if callable(getattr(literal, method, None)):
            return literal
        raise InvalidSpecificationError(
            path, f"{kind} entry {literal!r} is neither a reference nor a {kind}"
        )

    def to_literal(self) -> dict[str, Any]:
        literal: dict[str, Any] = {"name": self.name, "options": dict(self.options)}
        if self.break_chain_on_failure:
            literal["break_chain_on_failure"] = True
        return literal


def _parse_record_literal(literal: Mapping[str, Any], path: str) -> dict[str, Any]:
    """Translate a record literal into record attribute keyword arguments."""
    values: dict[str, Any] = {}
    for key, value in literal.items():
        attribute = _RECORD_KEYS.get(key)
        if attribute is None:
            raise InvalidSpecificationError(path, f"unknown record key '{key}'")
        if attribute in ("filters", "validators"):
            kind = attribute[:-1]
            if value is None:
                value = []
            if isinstance(value, str | Mapping) or not hasattr(value, "__iter__"):
                raise InvalidSpecificationError(path, f"'{key}' must be a list")
            value = tuple(UnitReference.from_literal(v, path, kind) for v in value)
        elif attribute in _BOOLEAN_ATTRIBUTES:
            value = bool(value)
        values[attribute] = value
    values.pop("name", None)
    return values


@frozen
class InputSpecification:
    """Validation record for one leaf field."""

    name: str
    required: bool = False
    filters: tuple[Any, ...] = ()
    validators: tuple[Any, ...] = ()
    type: str | None = None
    continue_if_empty: bool = False
    allow_empty: bool = False
    break_on_failure: bool = False
    error_message: str | None = None

    @property
    def effective_type(self) -> str:
        """Processing type used when building the engine."""
        return self.type or INPUT_TYPE

    @classmethod
    def from_literal(
        cls, name: str, literal: "Mapping[str, Any] | InputSpecification", path: str
    ) -> "InputSpecification":
        """
        Build a record from a literal, filling absent keys with defaults.

        Params:
            name: Field name
            literal: Record literal or an existing record
            path: Dotted field path for error messages

        Raises:
            InvalidSpecificationError: If the literal has unknown keys or bad values
        """
        if isinstance(literal, InputSpecification):
            return evolve(literal, name=name)
        if not isinstance(literal, Mapping):
            raise InvalidSpecificationError(path, "record must be a mapping")
        return cls(name=name, **_parse_record_literal(literal, path))

    def merged_with(
        self, literal: Mapping[str, Any], path: str
    ) -> "InputSpecification":
        """Shallow overlay: keys present in literal replace this record's values."""
        return evolve(self, **_parse_record_literal(literal, path))

    def to_literal(self) -> dict[str, Any]:
        literal: dict[str, Any] = {
            "required": self.required,
            "filters": [_unit_to_literal(f) for f in self.filters],
            "validators": [_unit_to_literal(v) for v in self.validators],
            "continue_if_empty": self.continue_if_empty,
            "allow_empty": self.allow_empty,
            "break_on_failure": self.break_on_failure,
        }
        if self.type is not None:
            literal["type"] = self.type
        if self.error_message is not None:
            literal["error_message"] = self.error_message
        return literal


def _unit_to_literal(unit: Any) -> Any:
    return unit.to_literal() if isinstance(unit, UnitReference) else unit


SpecificationNode = Union[InputSpecification, "ContainerSpecification"]


@frozen
class ContainerSpecification:
    """Compiled specification for a container and, recursively, its children."""

    name: str | None
    fields: dict[str, SpecificationNode] = field(factory=dict)
    type: str | None = None

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, path: str) -> bool:
        return self.get(path) is not None

    def get(self, path: str) -> SpecificationNode | None:
        """Look up a record or nested container by dotted/bracket path."""
        node: SpecificationNode = self
        for part in split_path_components(path):
            if not isinstance(node, ContainerSpecification) or part not in node.fields:
                return None
            node = node.fields[part]
        return node

    def flatten(self, prefix: tuple[str, ...] = ()) -> dict[str, InputSpecification]:
        """All leaf records keyed by dotted path, depth-first."""
        flat: dict[str, InputSpecification] = {}
        for name, node in self.fields.items():
            if isinstance(node, ContainerSpecification):
                flat.update(node.flatten((*prefix, name)))
            else:
                flat[join_path(prefix, name)] = node
        return flat

    def paths(self) -> list[str]:
        return list(self.flatten())

    def to_literal(self) -> dict[str, Any]:
        literal: dict[str, Any] = {
            name: node.to_literal() for name, node in self.fields.items()
        }
        if self.type is not None and "type" not in self.fields:
            literal["type"] = self.type
        return literal

    @classmethod
    def from_literal(
        cls,
        name: str | None,
        literal: Mapping[str, Any],
        prefix: tuple[str, ...] = (),
    ) -> "ContainerSpecification":
        """
        Build a container specification from a nested literal without a tree.

        A nested mapping is treated as a container when it declares
        ``type: input_filter`` or when none of its keys is a record key;
        anything else is a leaf record.
        """
        container_type = None
        fields: dict[str, SpecificationNode] = {}
        for key, value in literal.items():
            path = join_path(prefix, key)
            if key == "type" and isinstance(value, str):
                container_type = value
                continue
            if isinstance(value, ContainerSpecification | InputSpecification):
                fields[key] = evolve(value, name=key)
            elif _looks_like_container(value):
                nested = {k: v for k, v in value.items()}
                fields[key] = cls.from_literal(key, nested, (*prefix, key))
            else:
                fields[key] = InputSpecification.from_literal(key, value, path)
        return cls(name=name, fields=fields, type=container_type)


def _looks_like_container(value: Any) -> bool:
    if not isinstance(value, Mapping) or not value:
        return False
    if value.get("type") == INPUT_FILTER_TYPE:
        return True
    return not any(key in _RECORD_KEYS for key in value)
