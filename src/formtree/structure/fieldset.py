"""
Containers of elements.

A ``Fieldset`` owns an ordered collection of uniquely named children, which
may be elements or further fieldsets. Ownership is strict: an element belongs
to at most one container and a container can never become its own
descendant. Traversal follows insertion order when declared order is
preserved, otherwise priority descending with insertion order breaking ties.
"""

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from formtree.binding.hydrators import create_hydrator
from formtree.core.path_utils import join_path, split_path_components
from formtree.exceptions import (
    CyclicContainerError,
    DuplicateElementNameError,
    ElementOwnershipError,
)
from formtree.specification.records import INPUT_FILTER_TYPE
from formtree.structure.element import VALIDATION_HINT_OPTION, Element

if TYPE_CHECKING:
    from formtree.binding.hydrators import AbstractHydrator
    from formtree.structure.factory import ElementRegistry


class Fieldset(Element):
    """
    Container node.

    Params:
        name: Container name
        options: Option map; ``validation_hint`` holds a specification map for
            the children, ``preserve_defined_order`` fixes traversal order,
            ``hydrator`` (name, class or instance) sets the hydrator
        attributes: Attribute map
        element_registry: Registry used when children are added as spec dicts
    """

    is_container = True
    accepted_input_types = frozenset({INPUT_FILTER_TYPE})

    def __init__(
        self,
        name: str | None = None,
        options: dict[str, Any] | None = None,
        attributes: dict[str, Any] | None = None,
        element_registry: "ElementRegistry | None" = None,
    ):
        self._children: dict[str, Element] = {}
        self._priorities: dict[str, int] = {}
        self._preserve_declared_order = False
        self._hydrator: "AbstractHydrator | None" = None
        self._bound_object: Any = None
        self._element_registry = element_registry
        super().__init__(name, options, attributes)

    def set_option(self, key: str, value: Any) -> None:
        if key == "preserve_defined_order":
            self._preserve_declared_order = bool(value)
        elif key == "hydrator" and value is not None:
            self._hydrator = create_hydrator(value)
        super().set_option(key, value)

    # Children

    def add(
        self,
        element: Element | Mapping[str, Any],
        *,
        name: str | None = None,
        priority: int | None = None,
    ) -> Element:
        """
        Add a child element or container.

        Params:
            element: Element instance, or an element spec dict
                (``name``, ``type``, ``options``, ``attributes``, ``priority``)
            name: Name override applied before insertion
            priority: Ordering priority; higher values are traversed first

        Returns:
            The added element

        Raises:
            ValueError: If the element has no name
            DuplicateElementNameError: If a sibling already uses the name
            ElementOwnershipError: If the element belongs to another container
            CyclicContainerError: If the element is this container or an ancestor
        """
        if isinstance(element, Mapping):
            spec = dict(element)
            spec_priority = spec.pop("priority", None)
            if priority is None:
                priority = spec_priority
            element = self.element_registry.create(spec)
        if name is not None:
            element.name = name
        child_name = element.name
        if not child_name:
            raise ValueError(f"Cannot add an unnamed {type(element).__name__} to '{self.name}'")
        if child_name in self._children:
            raise DuplicateElementNameError(child_name, self.name)
        if element.parent is not None:
            raise ElementOwnershipError(child_name, element.parent.name)
        if element.is_container and (element is self or self._has_ancestor(element)):
            raise CyclicContainerError(child_name, self.name)

        element._parent = self
        self._children[child_name] = element
        self._priorities[child_name] = priority or 0
        return element

    def _has_ancestor(self, candidate: Element) -> bool:
        node = self._parent
        while node is not None:
            if node is candidate:
                return True
            node = node._parent
        return False

    def remove(self, name: str) -> Element | None:
        """Detach and return a child; None when no child has that name."""
        element = self._children.pop(name, None)
        if element is not None:
            self._priorities.pop(name, None)
            element._parent = None
        return element

    def has(self, name: str) -> bool:
        return name in self._children

    def get(self, name: str) -> Element:
        """
        Get a child by name or by dotted/bracket path.

        Raises:
            KeyError: If no element exists at that path
        """
        node: Element = self
        for part in split_path_components(name):
            if not isinstance(node, Fieldset) or part not in node._children:
                raise KeyError(f"No element '{name}' in container '{self.name}'")
            node = node._children[part]
        return node

    def set_priority(self, name: str, priority: int) -> None:
        if name not in self._children:
            raise KeyError(f"No element '{name}' in container '{self.name}'")
        self._priorities[name] = priority

    def get_priority(self, name: str) -> int:
        return self._priorities[name]

    @property
    def preserve_declared_order(self) -> bool:
        return self._preserve_declared_order

    @preserve_declared_order.setter
    def preserve_declared_order(self, flag: bool) -> None:
        self._preserve_declared_order = bool(flag)

    def __iter__(self) -> Iterator[Element]:
        names = list(self._children)
        if not self._preserve_declared_order:
            # sorted() is stable, so equal priorities keep insertion order
            names = sorted(names, key=lambda n: -self._priorities[n])
        return (self._children[n] for n in names)

    def __len__(self) -> int:
        return len(self._children)

    def __contains__(self, name: str) -> bool:
        return name in self._children

    def names(self) -> list[str]:
        return [child.name for child in self]

    def iter_elements(self) -> Iterator[Element]:
        return (child for child in self if not child.is_container)

    def iter_fieldsets(self) -> Iterator["Fieldset"]:
        return (child for child in self if child.is_container)

    def walk(self, prefix: tuple[str, ...] = ()) -> Iterator[tuple[str, Element]]:
        """Depth-first (container before children) ``(path, element)`` pairs."""
        for child in self:
            parts = (*prefix, child.name)
            yield join_path(parts), child
            if child.is_container:
                yield from child.walk(parts)

    @property
    def element_registry(self) -> "ElementRegistry":
        if self._element_registry is not None:
            return self._element_registry
        if self._parent is not None:
            return self._parent.element_registry
        from formtree.structure.factory import ElementRegistry

        self._element_registry = ElementRegistry()
        return self._element_registry

    # Values

    @property
    def value(self) -> dict[str, Any]:
        return {child.name: child.value for child in self}

    @value.setter
    def value(self, values: Mapping[str, Any] | None) -> None:
        self.populate_values(values or {})

    def populate_values(self, data: Mapping[str, Any]) -> None:
        """Set child values recursively from nested data; absent names are left alone."""
        for child in self:
            if child.name not in data:
                continue
            child_value = data[child.name]
            if child.is_container:
                if isinstance(child_value, Mapping):
                    child.populate_values(child_value)
            else:
                child.value = child_value

    # Validation hints

    def get_input_specification(self) -> None:
        return None

    def get_input_filter_specification(self) -> dict[str, Any] | None:
        """
        Validation hint covering this container's children.

        Returns:
            Nested specification map keyed by child name, or None
        """
        hint = self._options.get(VALIDATION_HINT_OPTION)
        return dict(hint) if hint else None

    # Binding

    @property
    def hydrator(self) -> "AbstractHydrator | None":
        return self._hydrator

    @hydrator.setter
    def hydrator(self, hydrator: "AbstractHydrator | None") -> None:
        self._hydrator = hydrator

    def resolve_hydrator(self) -> "AbstractHydrator | None":
        """Own hydrator, or the nearest ancestor's."""
        if self._hydrator is not None:
            return self._hydrator
        if self._parent is not None:
            return self._parent.resolve_hydrator()
        return None

    @property
    def bound_object(self) -> Any:
        return self._bound_object

    def bind_object(self, obj: Any) -> None:
        self._bound_object = obj

    def clear_bound_objects(self) -> None:
        self._bound_object = None
        for child in self.iter_fieldsets():
            child.clear_bound_objects()
