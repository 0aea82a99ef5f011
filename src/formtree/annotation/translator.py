"""
Translation of class metadata into element trees.

``build_specification`` turns ``ClassMetadata`` into the nested element spec
dict understood by ``ElementRegistry.create``; ``build_tree`` creates the
tree from it. Members are visited in declaration order. Nested containers
come from members whose metadata names a target class; their class is read
with the same reader and translated recursively.

Events dispatched during translation (params listeners may change):

- ``configure_form`` (target: ClassMetadata) ``spec``, ``root``
- ``discover_name`` (target: MemberMetadata) ``name``
- ``check_for_exclude`` (target: MemberMetadata) ``exclude``
- ``configure_element`` (target: MemberMetadata) ``name``, ``spec``
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from inflection import humanize, underscore

from formtree.annotation.attributes import (
    AllowEmpty,
    Attributes,
    BreakOnFailure,
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
)
from formtree.annotation.metadata import ClassMetadata, MemberMetadata
from formtree.binding.hydrators import PydanticModelHydrator
from formtree.events import Event
from formtree.exceptions import CyclicContainerError, DuplicateElementNameError
from formtree.structure.element import VALIDATION_HINT_OPTION
from formtree.structure.factory import ElementRegistry
from formtree.structure.form import Form

if TYPE_CHECKING:
    from formtree.structure.fieldset import Fieldset
    from formtree.validation.factory import InputFilterFactory

logger = logging.getLogger(__name__)

Dispatch = Callable[[str, Any, dict[str, Any]], Event]
Read = Callable[[type], ClassMetadata]

CONFIGURE_FORM = "configure_form"
DISCOVER_NAME = "discover_name"
CHECK_FOR_EXCLUDE = "check_for_exclude"
CONFIGURE_ELEMENT = "configure_element"
BUILD_POST = "build.post"

_RECORD_FLAGS = (
    (Required, "required"),
    (AllowEmpty, "allow_empty"),
    (ContinueIfEmpty, "continue_if_empty"),
    (BreakOnFailure, "break_on_failure"),
)


def _no_dispatch(name: str, target: Any, params: dict[str, Any]) -> Event:
    return Event(name, target, params)


def _record_hint(member: MemberMetadata) -> dict[str, Any]:
    """Validation record literal described by a member's annotations."""
    hint: dict[str, Any] = {}
    for annotation_type, key in _RECORD_FLAGS:
        flag = member.find(annotation_type)
        if flag is not None:
            hint[key] = flag.value
    error_message = member.find(ErrorMessage)
    if error_message is not None:
        hint["error_message"] = error_message.value
    filters = member.find_all(Filter)
    if filters:
        hint["filters"] = [f.to_literal() for f in filters]
    validators = member.find_all(Validator)
    if validators:
        hint["validators"] = [v.to_literal() for v in validators]
    input_type = member.find(Input)
    if input_type is not None:
        hint["type"] = input_type.value
    return hint


def _options(annotations_owner: ClassMetadata | MemberMetadata) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for annotation in annotations_owner.annotations:
        if isinstance(annotation, Options):
            options.update(annotation.value)
    return options


def _attributes(annotations_owner: ClassMetadata | MemberMetadata) -> dict[str, Any]:
    attributes: dict[str, Any] = {}
    for annotation in annotations_owner.annotations:
        if isinstance(annotation, Attributes):
            attributes.update(annotation.value)
    return attributes


def _container_spec(
    metadata: ClassMetadata, default_type: str, preserve_defined_order: bool
) -> dict[str, Any]:
    name = metadata.find(Name)
    element_type = metadata.find(Type)
    options = _options(metadata)
    hint = metadata.find(InputFilter)
    if hint is not None:
        options[VALIDATION_HINT_OPTION] = dict(hint.value)
    hydrator = metadata.find(Hydrator)
    options["hydrator"] = hydrator.value if hydrator is not None else PydanticModelHydrator
    options["preserve_defined_order"] = preserve_defined_order
    return {
        "name": name.value if name is not None else underscore(metadata.class_name),
        "type": element_type.value if element_type is not None else default_type,
        "options": options,
        "attributes": _attributes(metadata),
        "elements": [],
    }


def _element_spec(member: MemberMetadata, name: str) -> dict[str, Any]:
    element_type = member.find(Type)
    options = _options(member)
    if "label" not in options:
        options["label"] = member.description or humanize(member.field_name)
    hint = _record_hint(member)
    if hint:
        options[VALIDATION_HINT_OPTION] = {**options.get(VALIDATION_HINT_OPTION, {}), **hint}
    spec: dict[str, Any] = {
        "name": name,
        "type": element_type.value if element_type is not None else "element",
        "options": options,
        "attributes": _attributes(member),
    }
    priority = member.find(Priority)
    if priority is not None:
        spec["priority"] = priority.value
    return spec


def build_specification(
    metadata: ClassMetadata,
    read: Read,
    preserve_defined_order: bool = False,
    dispatch: Dispatch | None = None,
) -> dict[str, Any]:
    """
    Translate class metadata into a nested element spec dict.

    Params:
        metadata: Metadata of the root class
        read: Reader used for nested target classes
        preserve_defined_order: Force declaration order on every container
        dispatch: Event dispatcher; listeners may rename, exclude or reconfigure

    Returns:
        Element spec dict for the root container (type "form" by default)

    Raises:
        DuplicateElementNameError: If two members of a class resolve to one name
        CyclicContainerError: If a class contains itself through nested members
    """
    return _translate_class(
        metadata,
        read,
        preserve_defined_order,
        dispatch or _no_dispatch,
        stack=(metadata.cls,),
        root=True,
    )


def _translate_class(
    metadata: ClassMetadata,
    read: Read,
    preserve_defined_order: bool,
    dispatch: Dispatch,
    stack: tuple[type, ...],
    root: bool,
) -> dict[str, Any]:
    spec = _container_spec(metadata, "form" if root else "fieldset", preserve_defined_order)
    dispatch(CONFIGURE_FORM, metadata, {"spec": spec, "root": root})

    seen: set[str] = set()
    for member in sorted(metadata.members, key=lambda m: m.declaration_index):
        explicit_name = member.find(Name)
        event = dispatch(
            DISCOVER_NAME,
            member,
            {"name": explicit_name.value if explicit_name is not None else member.field_name},
        )
        name = event.get_param("name")

        event = dispatch(
            CHECK_FOR_EXCLUDE, member, {"exclude": member.find(Exclude) is not None}
        )
        if event.get_param("exclude"):
            logger.debug("Excluding %s.%s", metadata.class_name, member.field_name)
            continue

        if member.target is not None:
            if member.target in stack:
                raise CyclicContainerError(name, spec["name"])
            element_spec = _translate_class(
                read(member.target),
                read,
                preserve_defined_order,
                dispatch,
                stack=(*stack, member.target),
                root=False,
            )
            element_spec["name"] = name
            element_spec["options"].update(_options(member))
            element_spec["attributes"].update(_attributes(member))
            member_hint = member.find(InputFilter)
            if member_hint is not None:
                element_spec["options"][VALIDATION_HINT_OPTION] = dict(member_hint.value)
            member_type = member.find(Type)
            if member_type is not None:
                element_spec["type"] = member_type.value
            priority = member.find(Priority)
            if priority is not None:
                element_spec["priority"] = priority.value
        else:
            element_spec = _element_spec(member, name)

        event = dispatch(CONFIGURE_ELEMENT, member, {"name": name, "spec": element_spec})
        element_spec = event.get_param("spec")
        if event.get_param("name") != name:
            element_spec["name"] = event.get_param("name")
        name = element_spec["name"]
        if name in seen:
            raise DuplicateElementNameError(name, spec["name"])
        seen.add(name)
        spec["elements"].append(element_spec)

    return spec


def build_tree(
    metadata: ClassMetadata,
    read: Read,
    element_registry: ElementRegistry | None = None,
    preserve_defined_order: bool = False,
    dispatch: Dispatch | None = None,
    input_filter_factory: "InputFilterFactory | None" = None,
) -> "Fieldset":
    """
    Translate class metadata and create the element tree.

    Returns:
        The root container (a ``Form`` unless a ``Type`` annotation says otherwise)
    """
    registry = element_registry or ElementRegistry()
    spec = build_specification(metadata, read, preserve_defined_order, dispatch)
    root = registry.create(spec)
    if input_filter_factory is not None and isinstance(root, Form):
        root.input_filter_factory = input_filter_factory
    return root
