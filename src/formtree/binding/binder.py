"""
Recursive extract/populate between a container tree and a domain object.

Each container walks its bound object with its own hydrator (or the nearest
ancestor's). A child container whose extracted sub-object the child's
hydrator can extract gets that sub-object bound and is recursed into;
otherwise the parent's extracted value is kept for the whole subtree.
Population runs the same rule in reverse: children holding a bound
sub-object are populated first and the sub-object replaces their map.
"""

import logging
from collections.abc import Mapping
from copy import deepcopy
from enum import Enum
from typing import TYPE_CHECKING, Any

from attrs import define

from formtree.core.types import NestedValues
from formtree.exceptions import FormStateError, UnsupportedObjectError

if TYPE_CHECKING:
    from formtree.structure.fieldset import Fieldset
    from formtree.structure.form import Form
    from formtree.validation.input_filter import InputFilter
    from formtree.validation.result import ValidationResult

logger = logging.getLogger(__name__)


class BindMode(Enum):
    AUTO = "auto"
    MANUAL = "manual"


class DataSource(Enum):
    RAW_INPUT = "raw_input"
    EXTRACTED_FROM_OBJECT = "extracted_from_object"


class DataMode(Enum):
    OBJECT = "object"
    FLAT_MAP = "flat_map"


@define
class BindingContext:
    """Binding state of a form; cleared only by ``unbind``."""

    bound_object: Any
    bind_mode: BindMode = BindMode.AUTO
    data_source: DataSource = DataSource.EXTRACTED_FROM_OBJECT
    own_input_filter: "InputFilter | None" = None


def own_input_filter_of(obj: Any) -> Any:
    """The object's own validation engine (or literal), None when it has none."""
    provider = getattr(obj, "get_own_input_filter", None)
    if not callable(provider):
        return None
    return provider()


def extract_tree(container: "Fieldset", obj: Any) -> dict[str, Any]:
    """
    Extract nested values for a container from its object.

    Binds obj (and every extractable sub-object) to the matching container.

    Returns:
        Nested dict keyed by child names; empty when obj cannot be extracted
    """
    hydrator = container.resolve_hydrator()
    if hydrator is None or not hydrator.can_extract(obj):
        logger.debug("Container '%s' cannot extract %r", container.name, type(obj).__name__)
        return {}
    container.bind_object(obj)
    data = hydrator.extract(obj)
    for child in container.iter_fieldsets():
        child.bind_object(None)
        sub_object = data.get(child.name)
        child_hydrator = child.resolve_hydrator()
        if sub_object is None or child_hydrator is None:
            continue
        if child_hydrator.can_extract(sub_object):
            data[child.name] = extract_tree(child, sub_object)
    return data


def populate_tree(container: "Fieldset", values: Mapping[str, Any], obj: Any) -> Any:
    """
    Populate obj (and bound sub-objects) from nested validated values.

    Returns:
        The populated object
    """
    data = dict(values)
    for child in container.iter_fieldsets():
        nested = data.get(child.name)
        if child.bound_object is not None and isinstance(nested, Mapping):
            data[child.name] = populate_tree(child, nested, child.bound_object)
    hydrator = container.resolve_hydrator()
    if hydrator is None:
        raise FormStateError(container.name, "no hydrator available to populate the bound object")
    return hydrator.populate(data, obj)


class Binder:
    """
    Binding lifecycle of a form.

    Params:
        form: The root container whose data is bound and validated
    """

    def __init__(self, form: "Form"):
        self._form = form
        self._context: BindingContext | None = None
        self._data: NestedValues | None = None
        self._result: "ValidationResult | None" = None

    @property
    def context(self) -> BindingContext | None:
        return self._context

    @property
    def result(self) -> "ValidationResult | None":
        return self._result

    def bind(self, obj: Any, mode: BindMode = BindMode.AUTO) -> None:
        """
        Bind a domain object and seed element values from it.

        Params:
            obj: Domain object to extract from and populate on success
            mode: ``BindMode.MANUAL`` skips population after validation

        Raises:
            UnsupportedObjectError: If the form's hydrator cannot extract obj;
                the previous binding stays in place
        """
        hydrator = self._form.resolve_hydrator()
        if hydrator is None or not hydrator.can_extract(obj):
            raise UnsupportedObjectError(
                self._form.name,
                type(obj).__name__,
                type(hydrator).__name__ if hydrator is not None else None,
            )
        own_input_filter = own_input_filter_of(obj)
        if isinstance(own_input_filter, Mapping):
            own_input_filter = self._form.input_filter_factory.create_input_filter(
                own_input_filter, name=self._form.name
            )
        self._context = BindingContext(
            bound_object=obj, bind_mode=mode, own_input_filter=own_input_filter
        )
        self._data = None
        self._result = None
        self._form.populate_values(extract_tree(self._form, obj))
        logger.debug(
            "Bound %s to form '%s' (%s)", type(obj).__name__, self._form.name, mode.value
        )

    def unbind(self) -> None:
        self._context = None
        self._form.clear_bound_objects()

    def set_data(self, data: Mapping[str, Any]) -> None:
        self._data = dict(data)
        self._result = None
        self._form.populate_values(self._data)
        if self._context is not None:
            self._context.data_source = DataSource.RAW_INPUT

    def is_valid(self) -> bool:
        """
        Validate the set data, or data extracted from the bound object.

        Raises:
            FormStateError: If neither data nor a bound object is available
        """
        if self._data is not None:
            data = self._data
        elif self._context is not None:
            data = extract_tree(self._form, self._context.bound_object)
        else:
            raise FormStateError(self._form.name, "no data set and no object bound")

        # an own input filter replaces the composed engine, which is then never compiled
        if self._context is not None and self._context.own_input_filter is not None:
            engine = self._context.own_input_filter
        else:
            engine = self._form.get_input_filter()

        self._result = engine.validate(data)
        if self._result.is_valid and self._context is not None:
            if self._context.bind_mode is BindMode.AUTO:
                self._hydrate()
        return self._result.is_valid

    def bind_values(self) -> Any:
        """
        Populate the bound object from the last successful validation.

        Raises:
            FormStateError: If nothing is bound, nothing was validated, or the
                last validation failed
        """
        if self._context is None:
            raise FormStateError(self._form.name, "no object bound")
        result = self._require_result()
        if not result.is_valid:
            raise FormStateError(self._form.name, "cannot bind values of invalid data")
        return self._hydrate()

    def _hydrate(self) -> Any:
        return populate_tree(
            self._form, self._result.values, self._context.bound_object
        )

    def _require_result(self) -> "ValidationResult":
        if self._result is None:
            raise FormStateError(self._form.name, "data has not been validated yet")
        return self._result

    def get_data(self, mode: DataMode = DataMode.OBJECT) -> Any:
        """
        Validated data.

        Params:
            mode: ``DataMode.OBJECT`` returns the bound object when one is bound;
                ``DataMode.FLAT_MAP`` always returns the validated nested map
        """
        result = self._require_result()
        if mode is DataMode.OBJECT and self._context is not None:
            return self._context.bound_object
        return deepcopy(result.values)
