"""
Validation group selectors.

A selector restricts one validation pass to a subset of fields. Accepted
shapes:

* flat iterable of names: ``["name", "email"]``; a container name selects its
  whole subtree and dotted names (``"sender.name"``) address nested fields;
* nested map mirroring the tree: ``{"sender": ["name"], "meta": {"tags": None}}``;
* a mix: ``["subject", {"sender": ["email"]}]``.

Selectors are normalized into nested dicts where ``None`` means "everything
below this name".
"""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from formtree.core.path_utils import join_path, split_path_components
from formtree.exceptions import UnknownFieldError

if TYPE_CHECKING:
    from formtree.validation.input_filter import InputFilter

NormalizedGroup = dict[str, "NormalizedGroup | None"]


def _entries(selector: Any) -> list[tuple[str, Any]]:
    if selector is None:
        return []
    if isinstance(selector, str):
        selector = [selector]
    if isinstance(selector, Mapping):
        return list(selector.items())
    if not isinstance(selector, Iterable):
        raise TypeError(
            f"Validation group must be a list of names or a nested map, got {type(selector).__name__}"
        )

    entries: list[tuple[str, Any]] = []
    for item in selector:
        if isinstance(item, Mapping):
            entries.extend(item.items())
        elif isinstance(item, str):
            parts = split_path_components(item)
            nested: Any = None
            for part in reversed(parts[1:]):
                nested = {part: nested}
            entries.append((parts[0], nested))
        else:
            raise TypeError(f"Invalid validation group entry: {item!r}")
    return entries


def _merge(existing: NormalizedGroup | None, new: NormalizedGroup | None) -> NormalizedGroup | None:
    # None selects the whole subtree and absorbs any partial selection
    if existing is None or new is None:
        return None
    merged = dict(existing)
    for name, sub in new.items():
        merged[name] = _merge(merged[name], sub) if name in merged else sub
    return merged


def normalize_validation_group(
    input_filter: "InputFilter", selector: Any, prefix: tuple[str, ...] = ()
) -> NormalizedGroup:
    """
    Normalize and check a validation group selector against an engine.

    Params:
        input_filter: The engine (or nested engine) the selector applies to
        selector: Selector in any accepted shape
        prefix: Path of input_filter, for error messages

    Returns:
        Nested dict of selected names; None values select whole subtrees

    Raises:
        UnknownFieldError: If any selected path is not compiled in the engine
    """
    group: NormalizedGroup = {}
    for name, sub in _entries(selector):
        path = join_path(prefix, name)
        if not input_filter.has(name):
            raise UnknownFieldError(path)
        child = input_filter.get(name)
        if sub is None or sub is True:
            normalized = None
        elif child.is_input_filter:
            normalized = normalize_validation_group(child, sub, (*prefix, name))
        else:
            # a leaf cannot have a sub-selection
            first = _entries(sub)
            raise UnknownFieldError(join_path((*prefix, name), first[0][0]) if first else path)
        group[name] = _merge(group[name], normalized) if name in group else normalized
    return group
