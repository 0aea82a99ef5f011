"""
Construction of validation engines from compiled specifications.

``InputFilterFactory`` resolves unit references through the filter and
validator registries and picks an input class per record type.
"""

import logging
from collections.abc import Mapping
from typing import Any

from formtree.core.path_utils import join_path
from formtree.exceptions import (
    InvalidSpecificationError,
    ServiceNotFoundError,
    UnknownProcessingUnitError,
)
from formtree.processing.registry import FilterRegistry, UnitRegistry, ValidatorRegistry
from formtree.specification.records import (
    ARRAY_INPUT_TYPE,
    FILE_INPUT_TYPE,
    INPUT_TYPE,
    ContainerSpecification,
    InputSpecification,
    UnitReference,
)
from formtree.validation.input import ArrayInput, ChainEntry, FileInput, Input
from formtree.validation.input_filter import InputFilter

logger = logging.getLogger(__name__)


class InputFilterFactory:
    """
    Builds ``InputFilter`` engines.

    Params:
        filters: Filter registry (built-in filters by default)
        validators: Validator registry (built-in validators by default)
        input_types: Extra or replacement ``type name -> Input class`` entries
    """

    default_input_types: dict[str, type[Input]] = {
        INPUT_TYPE: Input,
        ARRAY_INPUT_TYPE: ArrayInput,
        FILE_INPUT_TYPE: FileInput,
    }

    def __init__(
        self,
        filters: FilterRegistry | None = None,
        validators: ValidatorRegistry | None = None,
        input_types: dict[str, type[Input]] | None = None,
    ):
        self.filters = filters or FilterRegistry()
        self.validators = validators or ValidatorRegistry()
        self.input_types = {**self.default_input_types, **(input_types or {})}

    def create_input_filter(
        self,
        specification: ContainerSpecification | Mapping[str, Any],
        name: str | None = None,
        prefix: tuple[str, ...] = (),
    ) -> InputFilter:
        """
        Build an engine for a container specification.

        Params:
            specification: Compiled specification or a nested literal
            name: Engine name when building from a literal
            prefix: Path of the container, for error messages

        Raises:
            InvalidSpecificationError: If a record type has no input class
            UnknownProcessingUnitError: If a filter or validator is not registered
        """
        if not isinstance(specification, ContainerSpecification):
            specification = ContainerSpecification.from_literal(name, specification, prefix)
        input_filter = InputFilter(specification.name)
        for field_name, node in specification.fields.items():
            parts = (*prefix, field_name)
            if isinstance(node, ContainerSpecification):
                input_filter.add(self.create_input_filter(node, prefix=parts), field_name)
            else:
                input_filter.add(self.create_input(node, join_path(parts)), field_name)
        logger.debug(
            "Built input filter '%s' with %d entries", specification.name, len(input_filter)
        )
        return input_filter

    def create_input(self, record: InputSpecification, path: str) -> Input:
        input_class = self.input_types.get(record.effective_type)
        if input_class is None:
            raise InvalidSpecificationError(
                path, f"unknown input type '{record.effective_type}'"
            )
        filters = [self._resolve(unit, self.filters, path) for unit in record.filters]
        validators = [
            ChainEntry(
                self._resolve(unit, self.validators, path),
                isinstance(unit, UnitReference) and unit.break_chain_on_failure,
            )
            for unit in record.validators
        ]
        return input_class(
            record.name,
            required=record.required,
            filters=filters,
            validators=validators,
            continue_if_empty=record.continue_if_empty,
            allow_empty=record.allow_empty,
            break_on_failure=record.break_on_failure,
            error_message=record.error_message,
        )

    @staticmethod
    def _resolve(unit: Any, registry: UnitRegistry, path: str) -> Any:
        if not isinstance(unit, UnitReference):
            return unit
        try:
            return registry.get(unit.name, unit.options)
        except ServiceNotFoundError as e:
            raise UnknownProcessingUnitError(path, registry.kind, unit.name) from e
