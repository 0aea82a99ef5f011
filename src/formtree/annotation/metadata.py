"""
Structural metadata read from a domain class.

Readers turn a class into ``ClassMetadata``; the translator only ever sees
these plain values, never the reflection API that produced them.
"""

from typing import Any

from attrs import frozen


@frozen
class MemberMetadata:
    """
    One declared member.

    Params:
        field_name: Attribute name on the class
        annotations: Annotation objects attached to the member
        annotation: Declared Python type
        description: Description text left after annotations were removed
        declaration_index: Position in declaration order
        target: Model class for nested containers, None for leaves
    """

    field_name: str
    annotations: tuple[Any, ...] = ()
    annotation: Any = None
    description: str | None = None
    declaration_index: int = 0
    target: type | None = None

    def find(self, annotation_type: type) -> Any:
        """Last annotation of a type (later annotations override earlier ones)."""
        found = None
        for annotation in self.annotations:
            if isinstance(annotation, annotation_type):
                found = annotation
        return found

    def find_all(self, annotation_type: type) -> list[Any]:
        return [a for a in self.annotations if isinstance(a, annotation_type)]


@frozen
class ClassMetadata:
    """
    A class with its class-level annotations and members in declaration order.
    """

    cls: type
    annotations: tuple[Any, ...] = ()
    description: str | None = None
    members: tuple[MemberMetadata, ...] = ()

    @property
    def class_name(self) -> str:
        return self.cls.__name__

    def find(self, annotation_type: type) -> Any:
        found = None
        for annotation in self.annotations:
            if isinstance(annotation, annotation_type):
                found = annotation
        return found

    def member(self, field_name: str) -> MemberMetadata:
        for member in self.members:
            if member.field_name == field_name:
                return member
        raise KeyError(f"{self.class_name} has no member '{field_name}'")
