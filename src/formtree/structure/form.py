"""
The bindable root container.

A ``Form`` owns the explicit specification for its tree, compiles the
validation engine on demand, applies validation groups and drives the
binding lifecycle. Compilation is explicit: after the tree changes call
``compile()`` or ``invalidate_input_filter()``; validating with a stale
engine is a caller error.
"""

import logging
from collections.abc import Mapping
from copy import deepcopy
from typing import TYPE_CHECKING, Any

from formtree.binding.binder import Binder, BindingContext, BindMode, DataMode
from formtree.binding.hydrators import ObjectPropertyHydrator
from formtree.core.path_utils import set_nested
from formtree.core.types import SpecificationLiteral, ValidationGroupSelector
from formtree.specification.merger import compile_specification
from formtree.specification.records import ContainerSpecification
from formtree.structure.fieldset import Fieldset
from formtree.validation.factory import InputFilterFactory
from formtree.validation.input_filter import InputFilter
from formtree.validation.result import ValidationResult

if TYPE_CHECKING:
    from formtree.structure.factory import ElementRegistry

logger = logging.getLogger(__name__)


class Form(Fieldset):
    """
    Root container with specification, validation and binding.

    Params:
        name: Form name
        options: Option map (see ``Fieldset``)
        attributes: Attribute map
        element_registry: Registry used for children added as spec dicts
        input_filter_factory: Factory building the validation engine
    """

    def __init__(
        self,
        name: str | None = None,
        options: dict[str, Any] | None = None,
        attributes: dict[str, Any] | None = None,
        element_registry: "ElementRegistry | None" = None,
        input_filter_factory: InputFilterFactory | None = None,
    ):
        super().__init__(name, options, attributes, element_registry=element_registry)
        if self._hydrator is None:
            self._hydrator = ObjectPropertyHydrator()
        self._input_filter_factory = input_filter_factory
        self._explicit: SpecificationLiteral = {}
        self._specification: ContainerSpecification | None = None
        self._input_filter: InputFilter | None = None
        self._validation_group: ValidationGroupSelector | None = None
        self._binder = Binder(self)

    @property
    def input_filter_factory(self) -> InputFilterFactory:
        if self._input_filter_factory is None:
            self._input_filter_factory = InputFilterFactory()
        return self._input_filter_factory

    @input_filter_factory.setter
    def input_filter_factory(self, factory: InputFilterFactory) -> None:
        self._input_filter_factory = factory
        self.invalidate_input_filter()

    # Explicit specification

    def set_input_specification(self, spec: Mapping[str, Any]) -> None:
        """
        Store explicit records, replacing any stored record at the same path.

        Container entries are merged per child; leaf records replace the stored
        record wholesale (filters and validators are never appended, and the
        element's own processing type is not inherited).

        Params:
            spec: Nested specification literal keyed by element names
        """
        self._merge_explicit(self._explicit, spec, self)
        self.invalidate_input_filter()

    def add_input_specification(self, path: str, record: Mapping[str, Any]) -> None:
        """Store (or replace) the explicit record for one dotted path."""
        set_nested(self._explicit, path, dict(record))
        self.invalidate_input_filter()

    def _merge_explicit(
        self, target: dict[str, Any], literal: Mapping[str, Any], container: Fieldset
    ) -> None:
        for key, value in literal.items():
            child = container.get(key) if container.has(key) else None
            if child is not None and child.is_container and isinstance(value, Mapping):
                nested = target.get(key)
                nested = dict(nested) if isinstance(nested, Mapping) else {}
                self._merge_explicit(nested, value, child)
                target[key] = nested
            else:
                target[key] = dict(value) if isinstance(value, Mapping) else value

    @property
    def explicit_specification(self) -> dict[str, Any]:
        return deepcopy(self._explicit)

    # Compilation

    def compile(self) -> InputFilter:
        """
        Compile the merged specification and build a fresh validation engine.

        The current validation group is re-applied to the new engine.

        Raises:
            SpecificationTypeMismatch: If a merged type does not fit its element
            InvalidSpecificationError: If a record cannot be interpreted
            UnknownFieldError: If the stored validation group no longer matches
        """
        specification = compile_specification(self, self._explicit)
        input_filter = self.input_filter_factory.create_input_filter(specification)
        if self._validation_group is not None:
            input_filter.set_validation_group(self._validation_group)
        self._specification = specification
        self._input_filter = input_filter
        logger.debug("Compiled form '%s' with %d fields", self.name, len(specification.paths()))
        return input_filter

    def invalidate_input_filter(self) -> None:
        self._specification = None
        self._input_filter = None

    @property
    def specification(self) -> ContainerSpecification:
        if self._specification is None:
            self._specification = compile_specification(self, self._explicit)
        return self._specification

    def get_input_filter(self) -> InputFilter:
        """The compiled engine; compiled on first use."""
        if self._input_filter is None:
            self.compile()
        return self._input_filter

    def set_input_filter(self, input_filter: InputFilter) -> None:
        """Use a ready-made engine instead of compiling one."""
        if self._validation_group is not None:
            input_filter.set_validation_group(self._validation_group)
        self._input_filter = input_filter
        self._specification = None

    # Validation groups

    def set_validation_group(self, selector: ValidationGroupSelector) -> None:
        """
        Restrict validation to a subset of fields.

        Raises:
            UnknownFieldError: If the selector names an unknown path; the
                previous group stays in effect
        """
        self.get_input_filter().set_validation_group(selector)
        self._validation_group = selector

    def set_validate_all(self) -> None:
        self._validation_group = None
        if self._input_filter is not None:
            self._input_filter.set_validate_all()

    @property
    def validation_group(self) -> ValidationGroupSelector | None:
        return self._validation_group

    # Binding

    def bind(self, obj: Any, mode: BindMode = BindMode.AUTO) -> None:
        self._binder.bind(obj, mode)

    def unbind(self) -> None:
        self._binder.unbind()

    @property
    def binding_context(self) -> BindingContext | None:
        return self._binder.context

    @property
    def object(self) -> Any:
        context = self._binder.context
        return context.bound_object if context is not None else None

    def set_data(self, data: Mapping[str, Any]) -> None:
        """Set raw input; element values are updated for presentation."""
        self._binder.set_data(data)

    def is_valid(self) -> bool:
        """
        Validate set data (or data extracted from the bound object).

        On success with ``BindMode.AUTO`` the bound object is populated.

        Raises:
            FormStateError: If neither data nor an object is available
        """
        return self._binder.is_valid()

    @property
    def validation_result(self) -> ValidationResult | None:
        return self._binder.result

    def get_data(self, mode: DataMode = DataMode.OBJECT) -> Any:
        """
        Raises:
            FormStateError: If no validation has run since data was set
        """
        return self._binder.get_data(mode)

    def bind_values(self) -> Any:
        """Populate the bound object after a ``BindMode.MANUAL`` validation."""
        return self._binder.bind_values()

    def get_messages(self) -> dict[str, Any]:
        result = self._binder.result
        return deepcopy(result.messages) if result is not None else {}
