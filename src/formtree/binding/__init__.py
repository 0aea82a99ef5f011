"""
Data binding between container trees and domain objects.
"""

from formtree.binding.binder import (
    Binder,
    BindingContext,
    BindMode,
    DataMode,
    DataSource,
    extract_tree,
    own_input_filter_of,
    populate_tree,
)
from formtree.binding.hydrators import (
    HYDRATORS,
    AbstractHydrator,
    MappingHydrator,
    ObjectPropertyHydrator,
    PydanticModelHydrator,
    create_hydrator,
)

__all__ = [
    "AbstractHydrator",
    "ObjectPropertyHydrator",
    "MappingHydrator",
    "PydanticModelHydrator",
    "HYDRATORS",
    "create_hydrator",
    "Binder",
    "BindingContext",
    "BindMode",
    "DataMode",
    "DataSource",
    "extract_tree",
    "populate_tree",
    "own_input_filter_of",
]
