"""
Metadata readers.

Both readers implement ``MetadataReader.read(cls) -> ClassMetadata`` for
pydantic model classes:

- ``DocstringMetadataReader`` parses annotation lines (``@Name("sender")``)
  at the start of the class docstring and of field descriptions;
- ``AttributeMetadataReader`` collects annotation objects from
  ``typing.Annotated`` field metadata and the ``form_annotations`` decorator.
"""

import ast
import importlib
import inspect
import json
import re
import types
import typing
from abc import ABC, abstractmethod
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from formtree.annotation.attributes import (
    ANNOTATION_TYPES,
    FORM_ANNOTATIONS_ATTRIBUTE,
    ComposedObject,
    Filter,
    Validator,
    is_annotation,
)
from formtree.annotation.metadata import ClassMetadata, MemberMetadata
from formtree.exceptions import AnnotationParseError

_ANNOTATION_LINE = re.compile(r"^@(?P<name>[A-Za-z_]\w*)\s*(?:\((?P<args>.*)\))?\s*$", re.DOTALL)
_KEYWORD_STYLE = (Filter, Validator)


def attribute_reflection_supported() -> bool:
    """Whether the runtime exposes ``typing.Annotated`` metadata to reflection."""
    if not hasattr(typing, "Annotated"):
        return False
    try:
        signature = inspect.signature(typing.get_type_hints)
    except (TypeError, ValueError):
        return False
    return "include_extras" in signature.parameters


def _bracket_balance(line: str) -> int:
    return (
        line.count("[")
        + line.count("{")
        + line.count("(")
        - line.count("]")
        - line.count("}")
        - line.count(")")
    )


def extract_annotations(content: str | None) -> tuple[list[str], str]:
    """
    Split leading annotation lines from text content.

    Annotations can only appear at the start of the content; the first line of
    regular text ends annotation parsing. An annotation continues over
    following lines while its brackets are unbalanced.

    Params:
        content: Docstring or field description

    Returns:
        Tuple of (annotation_sources, clean_content)
    """
    if not content:
        return [], ""

    lines = inspect.cleandoc(content).split("\n")
    annotations = []
    annotation_indices = set()
    current = None
    bracket_depth = 0

    for i, line in enumerate(lines):
        stripped = line.strip()

        if current is not None and bracket_depth > 0:
            current += "\n" + line
            annotation_indices.add(i)
            bracket_depth += _bracket_balance(line)
            continue

        if stripped.startswith("@"):
            if current is not None:
                annotations.append(current.strip())
            current = line
            annotation_indices.add(i)
            bracket_depth = _bracket_balance(line)
        elif stripped == "":
            continue
        else:
            break

    if current is not None:
        annotations.append(current.strip())

    clean_lines = [line for i, line in enumerate(lines) if i not in annotation_indices]
    return annotations, "\n".join(clean_lines).strip()


def _parse_arguments(source: str, raw: str, owner: str) -> list[Any]:
    try:
        return json.loads(f"[{raw}]")
    except json.JSONDecodeError:
        pass
    try:
        return list(ast.literal_eval(f"[{raw}]"))
    except (ValueError, TypeError, SyntaxError) as e:
        raise AnnotationParseError(source, owner, f"arguments are not JSON: {e}") from e


def parse_annotation(source: str, owner: str) -> Any:
    """
    Build an annotation object from one annotation source line.

    Raises:
        AnnotationParseError: If the name is not in the vocabulary or the
            arguments cannot be parsed
    """
    match = _ANNOTATION_LINE.match(source)
    if not match:
        raise AnnotationParseError(source, owner, "malformed annotation")
    annotation_type = ANNOTATION_TYPES.get(match.group("name"))
    if annotation_type is None:
        raise AnnotationParseError(source, owner, f"unknown annotation '{match.group('name')}'")

    raw = (match.group("args") or "").strip()
    args = _parse_arguments(source, raw, owner) if raw else []
    try:
        if (
            len(args) == 1
            and isinstance(args[0], dict)
            and issubclass(annotation_type, _KEYWORD_STYLE)
        ):
            return annotation_type(**args[0])
        return annotation_type(*args)
    except TypeError as e:
        raise AnnotationParseError(source, owner, str(e)) from e


def _resolve_target(target: Any, owner: str) -> type:
    if isinstance(target, type):
        return target
    if isinstance(target, str) and "." in target:
        module_name, _, class_name = target.rpartition(".")
        try:
            return getattr(importlib.import_module(module_name), class_name)
        except (ImportError, AttributeError) as e:
            raise AnnotationParseError(
                f"@ComposedObject({target!r})", owner, "target cannot be imported"
            ) from e
    raise AnnotationParseError(
        f"@ComposedObject({target!r})", owner, "target must be a class or a dotted path"
    )


def _model_target(annotation: Any) -> type | None:
    """Model class of a field annotation, unwrapping ``Optional[Model]``."""
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        candidates = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(candidates) == 1:
            return _model_target(candidates[0])
    return None


class MetadataReader(ABC):
    """Reads ``ClassMetadata`` from a pydantic model class."""

    variant: str = ""

    def read(self, cls: type) -> ClassMetadata:
        """
        Params:
            cls: pydantic model class

        Raises:
            TypeError: If cls is not a pydantic model class
            AnnotationParseError: If an annotation cannot be interpreted
        """
        if not (isinstance(cls, type) and issubclass(cls, BaseModel)):
            raise TypeError(f"{cls!r} is not a pydantic model class")

        annotations, description = self.class_annotations(cls)
        members = []
        for index, (field_name, field_info) in enumerate(cls.model_fields.items()):
            owner = f"{cls.__name__}.{field_name}"
            member_annotations, member_description = self.member_annotations(
                cls, field_name, field_info
            )
            composed = [a for a in member_annotations if isinstance(a, ComposedObject)]
            if composed:
                target = _resolve_target(composed[-1].target, owner)
            else:
                target = _model_target(field_info.annotation)
            members.append(
                MemberMetadata(
                    field_name=field_name,
                    annotations=tuple(member_annotations),
                    annotation=field_info.annotation,
                    description=member_description or None,
                    declaration_index=index,
                    target=target,
                )
            )
        return ClassMetadata(
            cls=cls,
            annotations=tuple(annotations),
            description=description or None,
            members=tuple(members),
        )

    @abstractmethod
    def class_annotations(self, cls: type) -> tuple[list[Any], str]:
        """Class-level annotations and the remaining class description."""

    @abstractmethod
    def member_annotations(
        self, cls: type, field_name: str, field_info: FieldInfo
    ) -> tuple[list[Any], str]:
        """Member annotations and the remaining member description."""


class DocstringMetadataReader(MetadataReader):
    variant = "docstring"

    def _parse(self, content: str | None, owner: str) -> tuple[list[Any], str]:
        sources, clean = extract_annotations(content)
        return [parse_annotation(source, owner) for source in sources], clean

    def class_annotations(self, cls: type) -> tuple[list[Any], str]:
        # Only the class's own docstring; BaseModel's must not leak in
        return self._parse(cls.__dict__.get("__doc__"), cls.__name__)

    def member_annotations(
        self, cls: type, field_name: str, field_info: FieldInfo
    ) -> tuple[list[Any], str]:
        return self._parse(field_info.description, f"{cls.__name__}.{field_name}")


class AttributeMetadataReader(MetadataReader):
    variant = "attribute"

    def class_annotations(self, cls: type) -> tuple[list[Any], str]:
        annotations = list(cls.__dict__.get(FORM_ANNOTATIONS_ATTRIBUTE, ()))
        doc = cls.__dict__.get("__doc__")
        return annotations, inspect.cleandoc(doc) if doc else ""

    def member_annotations(
        self, cls: type, field_name: str, field_info: FieldInfo
    ) -> tuple[list[Any], str]:
        annotations = [item for item in field_info.metadata if is_annotation(item)]
        return annotations, (field_info.description or "").strip()
