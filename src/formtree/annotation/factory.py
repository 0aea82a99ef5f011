"""
Factory selecting and configuring form builders.

Builder names:

- ``AnnotationBuilder`` / ``FormAnnotationBuilder``: docstring annotations,
  always available;
- ``AttributeBuilder`` / ``FormAttributeBuilder``: ``typing.Annotated``
  annotation objects, available when the runtime supports that reflection.

Configuration comes from the ``form_annotation_builder`` section of the
container's ``config`` service, overridden key by key by the ``config``
argument of ``build``.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Protocol

from formtree.annotation import readers
from formtree.annotation.builder import AbstractBuilder, AnnotationBuilder, AttributeBuilder
from formtree.exceptions import (
    ConfigurationError,
    IncompatibleRuntimeError,
    ServiceNotCreatedError,
    ServiceNotFoundError,
)

logger = logging.getLogger(__name__)

CONFIG_SECTION = "form_annotation_builder"
CONFIG_SERVICE = "config"
EVENT_MANAGER_SERVICE = "EventManager"
ELEMENT_MANAGER_SERVICE = "FormElementManager"
INPUT_FILTER_MANAGER_SERVICE = "InputFilterManager"

LEGACY_BUILDER_NAMES = ("AnnotationBuilder", "FormAnnotationBuilder")
ATTRIBUTE_BUILDER_NAMES = ("AttributeBuilder", "FormAttributeBuilder")

_CONFIG_ALIASES = {
    "preserve_defined_order": "preserve_defined_order",
    "preserveDefinedOrder": "preserve_defined_order",
    "listeners": "listeners",
}


class ServiceContainer(Protocol):
    def has(self, name: str) -> bool: ...

    def get(self, name: str) -> Any: ...


@dataclass
class BuilderConfig:
    """Builder configuration."""

    preserve_defined_order: bool = False
    listeners: list[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, config: Mapping[str, Any] | None = None) -> "BuilderConfig":
        """
        Factory method to create config from dict with defaults.

        Raises:
            ConfigurationError: If a key is unknown or a value has the wrong shape
        """
        return cls(**cls._normalize(config))

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "BuilderConfig":
        """
        Create from a YAML file.

        The file holds either the builder options themselves or an application
        config with a ``form_annotation_builder`` section.

        Raises:
            ConfigurationError: If the document is not a mapping or has unknown keys
        """
        import yaml

        path = Path(yaml_path)
        with path.open() as f:
            config = yaml.safe_load(f) or {}

        if isinstance(config, Mapping) and CONFIG_SECTION in config:
            config = config[CONFIG_SECTION]
        return cls.from_dict(config)

    @staticmethod
    def _normalize(config: Mapping[str, Any] | None) -> dict[str, Any]:
        if config is None:
            return {}
        if not isinstance(config, Mapping):
            raise ConfigurationError(
                f"Builder configuration must be a mapping, got {type(config).__name__}"
            )
        normalized: dict[str, Any] = {}
        for key, value in config.items():
            if key not in _CONFIG_ALIASES:
                raise ConfigurationError(f"Unknown builder configuration key '{key}'")
            normalized[_CONFIG_ALIASES[key]] = value
        if "listeners" in normalized:
            listeners = normalized["listeners"]
            if isinstance(listeners, (str, bytes)) or not isinstance(listeners, (list, tuple)):
                raise ConfigurationError("'listeners' must be a list of listener references")
            normalized["listeners"] = list(listeners)
        if "preserve_defined_order" in normalized:
            normalized["preserve_defined_order"] = bool(normalized["preserve_defined_order"])
        return normalized

    def merged_with(self, config: Mapping[str, Any] | None) -> "BuilderConfig":
        """A copy with the keys present in config overriding this one."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        return BuilderConfig(**{**current, **self._normalize(config)})


class BuilderAbstractFactory:
    """
    Creates builders by name.

    Params:
        container: Optional service container (``has(name)``/``get(name)``)
    """

    def __init__(self, container: ServiceContainer | None = None):
        self.container = container

    def can_build(self, name: str) -> bool:
        if name in LEGACY_BUILDER_NAMES:
            return True
        if name in ATTRIBUTE_BUILDER_NAMES:
            return readers.attribute_reflection_supported()
        return False

    def build(self, name: str, config: Mapping[str, Any] | None = None) -> AbstractBuilder:
        """
        Create and configure a builder.

        Params:
            name: Builder name
            config: Options overriding the container's builder configuration

        Returns:
            A builder with every configured listener attached

        Raises:
            ServiceNotFoundError: If the name is not a builder name
            IncompatibleRuntimeError: If the attribute builder is requested on a
                runtime without ``typing.Annotated`` reflection
            ConfigurationError: If the configuration is malformed
            ServiceNotCreatedError: If a listener lacks a callable ``attach``
        """
        if name in LEGACY_BUILDER_NAMES:
            builder_class: type[AbstractBuilder] = AnnotationBuilder
        elif name in ATTRIBUTE_BUILDER_NAMES:
            if not readers.attribute_reflection_supported():
                raise IncompatibleRuntimeError(name, "typing.Annotated metadata reflection")
            builder_class = AttributeBuilder
        else:
            raise ServiceNotFoundError(name, [*LEGACY_BUILDER_NAMES, *ATTRIBUTE_BUILDER_NAMES])
        logger.debug("Selected %s for '%s'", builder_class.__name__, name)

        builder_config = BuilderConfig.from_dict(self._container_config()).merged_with(config)
        listeners = [self._resolve_listener(ref) for ref in builder_config.listeners]

        builder = builder_class(
            events=self._service(EVENT_MANAGER_SERVICE),
            element_registry=self._service(ELEMENT_MANAGER_SERVICE),
            input_filter_factory=self._service(INPUT_FILTER_MANAGER_SERVICE),
            preserve_defined_order=builder_config.preserve_defined_order,
        )
        for listener in listeners:
            listener.attach(builder.events)
            logger.debug("Attached %s to %s", type(listener).__name__, builder_class.__name__)
        return builder

    def _service(self, name: str) -> Any:
        if self.container is None or not self.container.has(name):
            return None
        return self.container.get(name)

    def _container_config(self) -> Mapping[str, Any] | None:
        config = self._service(CONFIG_SERVICE)
        if config is None:
            return None
        if not isinstance(config, Mapping):
            logger.warning(
                "Ignoring '%s' service of type %s; expected a mapping",
                CONFIG_SERVICE,
                type(config).__name__,
            )
            return None
        return config.get(CONFIG_SECTION)

    def _resolve_listener(self, reference: Any) -> Any:
        listener = reference
        if isinstance(reference, str):
            if self.container is None or not self.container.has(reference):
                raise ServiceNotCreatedError("Invalid event listener", reference)
            listener = self.container.get(reference)
        if not callable(getattr(listener, "attach", None)):
            raise ServiceNotCreatedError(
                "Invalid event listener",
                reference if isinstance(reference, str) else type(reference).__name__,
            )
        return listener
