"""
Building forms from annotated pydantic model classes.
"""

from formtree.annotation.attributes import (
    AllowEmpty,
    Attributes,
    BreakOnFailure,
    ComposedObject,
    ContinueIfEmpty,
    ErrorMessage,
    Exclude,
    Filter,
    Hydrator,
    Input,
    InputFilter,
    Name,
    Options,
    Priority,
    Required,
    Type,
    Validator,
    form_annotations,
)
from formtree.annotation.builder import (
    AbstractBuilder,
    AnnotationBuilder,
    AttributeBuilder,
    BuilderState,
)
from formtree.annotation.factory import BuilderAbstractFactory, BuilderConfig
from formtree.annotation.metadata import ClassMetadata, MemberMetadata
from formtree.annotation.readers import (
    AttributeMetadataReader,
    DocstringMetadataReader,
    MetadataReader,
    attribute_reflection_supported,
    extract_annotations,
)
from formtree.annotation.translator import build_specification, build_tree

__all__ = [
    # Vocabulary
    "Name",
    "Type",
    "Options",
    "Attributes",
    "Required",
    "AllowEmpty",
    "ContinueIfEmpty",
    "BreakOnFailure",
    "ErrorMessage",
    "Filter",
    "Validator",
    "Priority",
    "Exclude",
    "ComposedObject",
    "InputFilter",
    "Hydrator",
    "Input",
    "form_annotations",
    # Metadata
    "ClassMetadata",
    "MemberMetadata",
    "MetadataReader",
    "DocstringMetadataReader",
    "AttributeMetadataReader",
    "attribute_reflection_supported",
    "extract_annotations",
    # Translation and builders
    "build_specification",
    "build_tree",
    "AbstractBuilder",
    "AnnotationBuilder",
    "AttributeBuilder",
    "BuilderState",
    "BuilderAbstractFactory",
    "BuilderConfig",
]
