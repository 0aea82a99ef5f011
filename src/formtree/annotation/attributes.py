"""
The annotation vocabulary.

Annotation objects are plain immutable values. They can be attached to
pydantic fields through ``typing.Annotated`` metadata, to classes through
the ``form_annotations`` decorator, or written as ``@Name("x")`` lines at
the start of class docstrings and field descriptions.
"""

from typing import Any

from attrs import field, frozen


@frozen
class Name:
    value: str


@frozen
class Type:
    """Element type name (or Element subclass) resolved through the element registry."""

    value: Any


@frozen(init=False)
class Options:
    """Element options; accepts a mapping, keyword arguments, or both."""

    value: dict[str, Any]

    def __init__(self, value: dict[str, Any] | None = None, **options: Any):
        self.__attrs_init__({**(value or {}), **options})


@frozen(init=False)
class Attributes:
    value: dict[str, Any]

    def __init__(self, value: dict[str, Any] | None = None, **attributes: Any):
        self.__attrs_init__({**(value or {}), **attributes})


@frozen
class Required:
    value: bool = True


@frozen
class AllowEmpty:
    value: bool = True


@frozen
class ContinueIfEmpty:
    value: bool = True


@frozen
class BreakOnFailure:
    value: bool = True


@frozen
class ErrorMessage:
    value: str


@frozen(init=False)
class Filter:
    """A filter unit reference: ``Filter("StringTrim")`` or ``Filter("StringTrim", charlist=" ")``."""

    name: str
    options: dict[str, Any] = field(factory=dict)

    def __init__(self, name: str, options: dict[str, Any] | None = None, **kwargs: Any):
        self.__attrs_init__(name, {**(options or {}), **kwargs})

    def to_literal(self) -> dict[str, Any]:
        return {"name": self.name, "options": dict(self.options)}


@frozen(init=False)
class Validator:
    """A validator unit reference with its own break-chain flag."""

    name: str
    options: dict[str, Any] = field(factory=dict)
    break_chain_on_failure: bool = False

    def __init__(
        self,
        name: str,
        options: dict[str, Any] | None = None,
        break_chain_on_failure: bool = False,
        **kwargs: Any,
    ):
        self.__attrs_init__(name, {**(options or {}), **kwargs}, break_chain_on_failure)

    def to_literal(self) -> dict[str, Any]:
        literal: dict[str, Any] = {"name": self.name, "options": dict(self.options)}
        if self.break_chain_on_failure:
            literal["break_chain_on_failure"] = True
        return literal


@frozen
class Priority:
    value: int


@frozen
class Exclude:
    pass


@frozen
class ComposedObject:
    """
    Build the member as a nested container from another model class.

    ``target`` is a class, or a dotted import path when written in a docstring.
    """

    target: Any


@frozen(init=False)
class InputFilter:
    """Validation hint for the children of the annotated container."""

    value: dict[str, Any]

    def __init__(self, value: dict[str, Any] | None = None, **entries: Any):
        self.__attrs_init__({**(value or {}), **entries})


@frozen
class Hydrator:
    """Hydrator name (``object_property``, ``mapping``, ``pydantic``), class or instance."""

    value: Any


@frozen
class Input:
    """Processing type of the element's validation record (``input``, ``array``, ``file``)."""

    value: str


ANNOTATION_TYPES: dict[str, type] = {
    annotation.__name__: annotation
    for annotation in (
        Name,
        Type,
        Options,
        Attributes,
        Required,
        AllowEmpty,
        ContinueIfEmpty,
        BreakOnFailure,
        ErrorMessage,
        Filter,
        Validator,
        Priority,
        Exclude,
        ComposedObject,
        InputFilter,
        Hydrator,
        Input,
    )
}

FORM_ANNOTATIONS_ATTRIBUTE = "__form_annotations__"


def is_annotation(value: Any) -> bool:
    return isinstance(value, tuple(ANNOTATION_TYPES.values()))


def form_annotations(*annotations: Any):
    """
    Class decorator attaching class-level annotations.

    Raises:
        TypeError: If an argument is not part of the annotation vocabulary
    """
    for annotation in annotations:
        if not is_annotation(annotation):
            raise TypeError(f"{annotation!r} is not a form annotation")

    def decorate(cls):
        setattr(cls, FORM_ANNOTATIONS_ATTRIBUTE, tuple(annotations))
        return cls

    return decorate
