"""
Builders creating forms from annotated pydantic model classes.

``AnnotationBuilder`` reads docstring annotations and is always available;
``AttributeBuilder`` reads ``typing.Annotated`` annotation objects and
refuses construction on runtimes without that reflection support.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from formtree.annotation import readers
from formtree.annotation.readers import (
    AttributeMetadataReader,
    DocstringMetadataReader,
    MetadataReader,
)
from formtree.annotation.translator import BUILD_POST, build_specification, build_tree
from formtree.events import Event, EventManager
from formtree.exceptions import IncompatibleRuntimeError
from formtree.structure.factory import ElementRegistry
from formtree.structure.fieldset import Fieldset
from formtree.validation.factory import InputFilterFactory

logger = logging.getLogger(__name__)


class BuilderState(Enum):
    IDLE = "idle"
    SELECTING_VARIANT = "selecting_variant"
    CONSTRUCTING_TREE = "constructing_tree"
    DISPATCHING_LISTENER_EVENTS = "dispatching_listener_events"
    BUILT = "built"
    FAILED = "failed"


class AbstractBuilder(ABC):
    """
    Shared builder behaviour.

    Params:
        events: Event manager listeners are attached to
        element_registry: Registry resolving element type names
        input_filter_factory: Factory handed to built forms
        preserve_defined_order: Force declaration order on every container
    """

    variant: str = ""

    def __init__(
        self,
        events: EventManager | None = None,
        element_registry: ElementRegistry | None = None,
        input_filter_factory: InputFilterFactory | None = None,
        preserve_defined_order: bool = False,
    ):
        self._events = events or EventManager()
        self.element_registry = element_registry or ElementRegistry()
        self.input_filter_factory = input_filter_factory
        self._preserve_defined_order = bool(preserve_defined_order)
        self._state = BuilderState.SELECTING_VARIANT
        self.reader = self.create_reader()
        self._state = BuilderState.IDLE

    @abstractmethod
    def create_reader(self) -> MetadataReader:
        pass

    @property
    def events(self) -> EventManager:
        return self._events

    @events.setter
    def events(self, events: EventManager) -> None:
        self._events = events

    @property
    def preserve_defined_order(self) -> bool:
        return self._preserve_defined_order

    @preserve_defined_order.setter
    def preserve_defined_order(self, flag: bool) -> None:
        self._preserve_defined_order = bool(flag)

    @property
    def state(self) -> BuilderState:
        return self._state

    def _dispatch(self, name: str, target: Any, params: dict[str, Any]) -> Event:
        self._state = BuilderState.DISPATCHING_LISTENER_EVENTS
        try:
            event = Event(name, target, params)
            self._events.trigger_event(event)
        finally:
            self._state = BuilderState.CONSTRUCTING_TREE
        return event

    def get_form_specification(self, cls: type) -> dict[str, Any]:
        """
        Element spec dict for a model class.

        Raises:
            TypeError: If cls is not a pydantic model class
            AnnotationParseError: If an annotation cannot be interpreted
            DuplicateElementNameError: If two members share a name
            CyclicContainerError: If nested members form a cycle
        """
        self._state = BuilderState.CONSTRUCTING_TREE
        try:
            specification = build_specification(
                self.reader.read(cls),
                self.reader.read,
                self._preserve_defined_order,
                self._dispatch,
            )
        except Exception:
            self._state = BuilderState.FAILED
            raise
        self._state = BuilderState.BUILT
        return specification

    def create_form(self, cls: type) -> Fieldset:
        """
        Build the element tree for a model class.

        Returns:
            The root container, a ``Form`` unless the class annotates another type

        Raises:
            Everything ``get_form_specification`` raises, plus
            ServiceNotFoundError for unknown element types
        """
        self._state = BuilderState.CONSTRUCTING_TREE
        try:
            metadata = self.reader.read(cls)
            form = build_tree(
                metadata,
                self.reader.read,
                element_registry=self.element_registry,
                preserve_defined_order=self._preserve_defined_order,
                dispatch=self._dispatch,
                input_filter_factory=self.input_filter_factory,
            )
            self._dispatch(BUILD_POST, form, {"metadata": metadata})
        except Exception:
            self._state = BuilderState.FAILED
            raise
        self._state = BuilderState.BUILT
        logger.debug("Built form '%s' from %s (%s)", form.name, cls.__name__, self.variant)
        return form


class AnnotationBuilder(AbstractBuilder):
    """Builder reading ``@Name(...)``-style lines from docstrings and descriptions."""

    variant = "docstring"

    def create_reader(self) -> MetadataReader:
        return DocstringMetadataReader()


class AttributeBuilder(AbstractBuilder):
    """
    Builder reading annotation objects from ``typing.Annotated`` metadata.

    Raises:
        IncompatibleRuntimeError: On construction, if the runtime cannot
            reflect ``typing.Annotated`` metadata
    """

    variant = "attribute"

    def __init__(self, *args: Any, **kwargs: Any):
        if not readers.attribute_reflection_supported():
            raise IncompatibleRuntimeError(
                type(self).__name__, "typing.Annotated metadata reflection"
            )
        super().__init__(*args, **kwargs)

    def create_reader(self) -> MetadataReader:
        return AttributeMetadataReader()
