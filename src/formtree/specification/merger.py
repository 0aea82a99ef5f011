"""
Specification merger.

Walks a container tree depth-first (container before its children) and
resolves one record per path by strict priority:

1. an explicit record for the path, used verbatim (absent keys default);
2. the hint layer, shallowly merged over the default record: the node's own
   hint, overlaid by the enclosing container's hint entry for that child;
3. the default record.

The merged processing type must be one the node kind accepts, otherwise
compilation fails naming the field.
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from formtree.core.path_utils import join_path
from formtree.exceptions import InvalidSpecificationError, SpecificationTypeMismatch
from formtree.specification.records import ContainerSpecification, InputSpecification

if TYPE_CHECKING:
    from formtree.structure.element import Element
    from formtree.structure.fieldset import Fieldset

logger = logging.getLogger(__name__)


def compile_specification(
    root: "Fieldset", explicit_spec: Mapping[str, Any] | None = None
) -> ContainerSpecification:
    """
    Compile the merged specification for a container tree.

    Params:
        root: Root container of the tree
        explicit_spec: Partial nested specification literal; records found here
            win over any hint

    Returns:
        ContainerSpecification covering every path reachable from root

    Raises:
        SpecificationTypeMismatch: If a merged type is incompatible with its node
        InvalidSpecificationError: If a literal cannot be interpreted
    """
    return _compile_container(root, explicit_spec or {}, None, ())


def _container_literal(value: Any, path: str, source: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidSpecificationError(path, f"{source} for a container must be a mapping")
    return value


def _compile_container(
    container: "Fieldset",
    explicit: Mapping[str, Any],
    inherited_hint: Mapping[str, Any] | None,
    parts: tuple[str, ...],
) -> ContainerSpecification:
    path = join_path(parts) or "<root>"
    own_hint = _container_literal(
        container.get_input_filter_specification(), path, "container hint"
    )
    hint = {**own_hint, **(inherited_hint or {})}

    # "type" is reserved for the container itself unless a child uses the name
    type_is_reserved = not container.has("type")
    container_type = None
    if type_is_reserved:
        container_type = explicit.get("type", hint.get("type"))
    if container_type is not None and not container.accepts_input_type(container_type):
        raise SpecificationTypeMismatch(path, container_type, type(container).__name__)

    for key in explicit:
        if not container.has(key) and not (type_is_reserved and key == "type"):
            logger.warning(
                "Explicit specification for '%s' has no matching element; ignored",
                join_path(parts, key),
            )

    fields: dict[str, Any] = {}
    for child in container:
        child_parts = (*parts, child.name)
        child_path = join_path(child_parts)
        if child.is_container:
            fields[child.name] = _compile_container(
                child,
                _container_literal(explicit.get(child.name), child_path, "explicit specification"),
                _container_literal(hint.get(child.name), child_path, "container hint"),
                child_parts,
            )
        else:
            fields[child.name] = _resolve_record(child, explicit, hint, child_path)
    return ContainerSpecification(
        name=container.name, fields=fields, type=container_type
    )


def _resolve_record(
    element: "Element",
    explicit: Mapping[str, Any],
    hint: Mapping[str, Any],
    path: str,
) -> InputSpecification:
    name = element.name
    if name in explicit:
        record = InputSpecification.from_literal(name, explicit[name], path)
        source = "explicit"
    else:
        record = InputSpecification(name=name)
        source = "default"
        node_hint = element.get_input_specification()
        if node_hint is not None:
            record = record.merged_with(node_hint, path)
            source = "element hint"
        container_entry = hint.get(name)
        if container_entry is not None:
            if not isinstance(container_entry, Mapping):
                raise InvalidSpecificationError(path, "container hint entry must be a mapping")
            record = record.merged_with(container_entry, path)
            source = "container hint"

    if not element.accepts_input_type(record.effective_type):
        raise SpecificationTypeMismatch(path, record.effective_type, type(element).__name__)
    logger.debug("Resolved '%s' from %s (type=%s)", path, source, record.effective_type)
    return record


