"""
Hydrators: the extract/populate protocol between trees and domain objects.

``extract(obj)`` returns a dict of field values; ``populate(data, obj)``
writes values back and returns the object. ``can_extract(obj)`` tells the
binder whether a nested sub-object can be walked with the same protocol.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping
from typing import Any

from pydantic import BaseModel

from formtree.exceptions import ServiceNotFoundError

_SCALARS = (str, bytes, int, float, bool, list, tuple, set, frozenset)


class AbstractHydrator(ABC):
    @abstractmethod
    def can_extract(self, obj: Any) -> bool:
        """Whether obj can be extracted and populated by this hydrator."""

    @abstractmethod
    def extract(self, obj: Any) -> dict[str, Any]:
        """Field values of obj."""

    @abstractmethod
    def populate(self, data: Mapping[str, Any], obj: Any) -> Any:
        """Write data into obj and return it."""


class ObjectPropertyHydrator(AbstractHydrator):
    """Reads and writes public instance attributes."""

    def can_extract(self, obj: Any) -> bool:
        if obj is None or isinstance(obj, _SCALARS) or isinstance(obj, Mapping):
            return False
        return hasattr(obj, "__dict__")

    def extract(self, obj: Any) -> dict[str, Any]:
        return {
            name: value for name, value in vars(obj).items() if not name.startswith("_")
        }

    def populate(self, data: Mapping[str, Any], obj: Any) -> Any:
        for name, value in data.items():
            setattr(obj, name, value)
        return obj


class MappingHydrator(AbstractHydrator):
    """Treats mutable mappings as domain objects."""

    def can_extract(self, obj: Any) -> bool:
        return isinstance(obj, MutableMapping)

    def extract(self, obj: Any) -> dict[str, Any]:
        return dict(obj)

    def populate(self, data: Mapping[str, Any], obj: Any) -> Any:
        obj.update(data)
        return obj


class PydanticModelHydrator(AbstractHydrator):
    """
    Reads and writes declared fields of pydantic models.

    Nested models are returned as model instances (not dumped) so the binder
    can recurse into them. Keys that are not model fields are ignored on
    populate.
    """

    def can_extract(self, obj: Any) -> bool:
        return isinstance(obj, BaseModel)

    def extract(self, obj: Any) -> dict[str, Any]:
        return {name: getattr(obj, name) for name in type(obj).model_fields}

    def populate(self, data: Mapping[str, Any], obj: Any) -> Any:
        fields = type(obj).model_fields
        for name, value in data.items():
            if name in fields:
                setattr(obj, name, value)
        return obj


HYDRATORS: dict[str, type[AbstractHydrator]] = {
    "object_property": ObjectPropertyHydrator,
    "mapping": MappingHydrator,
    "pydantic": PydanticModelHydrator,
}


def create_hydrator(reference: "str | type[AbstractHydrator] | AbstractHydrator") -> AbstractHydrator:
    """
    Resolve a hydrator reference.

    Params:
        reference: Registered name, hydrator class, or hydrator instance

    Raises:
        ServiceNotFoundError: If a name is not registered
    """
    if isinstance(reference, AbstractHydrator):
        return reference
    if isinstance(reference, type) and issubclass(reference, AbstractHydrator):
        return reference()
    if reference not in HYDRATORS:
        raise ServiceNotFoundError(str(reference), sorted(HYDRATORS))
    return HYDRATORS[reference]()
