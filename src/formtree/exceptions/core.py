"""
Exception classes for form tree composition, validation and building.

This module defines specific exception types for the configuration and
programming errors that can occur while assembling a tree, compiling its
specification, selecting validation groups and running the reflective
builder. Data-level validation failures are never raised; they are reported
through validation results.
"""


class FormTreeError(Exception):
    """Base exception for all formtree errors."""

    pass


class TreeStructureError(FormTreeError):
    """Base exception for violations of the strict tree ownership rules."""

    pass


class DuplicateElementNameError(TreeStructureError):
    """Raised when a container already holds a child with the same name."""

    def __init__(self, name: str, container: str | None):
        """
        Initialize the exception.

        Params:
            name: The colliding child name
            container: Name of the container that rejected the child
        """
        self.name = name
        self.container = container
        super().__init__(
            f"An element named '{name}' already exists in container '{container}'"
        )


class CyclicContainerError(TreeStructureError):
    """Raised when a container would become its own descendant."""

    def __init__(self, name: str | None, container: str | None):
        """
        Initialize the exception.

        Params:
            name: Name of the container being added
            container: Name of the container it was added to
        """
        self.name = name
        self.container = container
        super().__init__(
            f"Cannot add container '{name}' to '{container}': "
            "a container cannot be its own descendant"
        )


class ElementOwnershipError(TreeStructureError):
    """Raised when an element that already has a parent is added elsewhere."""

    def __init__(self, name: str | None, owner: str | None):
        """
        Initialize the exception.

        Params:
            name: Name of the element
            owner: Name of the container that currently owns it
        """
        self.name = name
        self.owner = owner
        super().__init__(
            f"Element '{name}' already belongs to container '{owner}'; remove it first"
        )


class InvalidSpecificationError(FormTreeError):
    """Raised when a specification literal cannot be interpreted."""

    def __init__(self, path: str, reason: str):
        """
        Initialize the exception.

        Params:
            path: Field path of the offending record
            reason: Why the record is invalid
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid specification for '{path}': {reason}")


class SpecificationTypeMismatch(InvalidSpecificationError):
    """Raised when a merged record selects a processing type the node cannot use."""

    def __init__(self, path: str, input_type: str, node_kind: str):
        """
        Initialize the exception.

        Params:
            path: Dotted path of the field
            input_type: The processing type selected by the merged record
            node_kind: Class name of the node at that path
        """
        self.input_type = input_type
        self.node_kind = node_kind
        super().__init__(
            path,
            f"processing type '{input_type}' is not compatible with {node_kind}",
        )


class UnknownProcessingUnitError(InvalidSpecificationError):
    """Raised when a filter or validator name is not registered."""

    def __init__(self, path: str, kind: str, unit_name: str):
        """
        Initialize the exception.

        Params:
            path: Field path referencing the unit
            kind: Either "filter" or "validator"
            unit_name: The unresolved unit name
        """
        self.kind = kind
        self.unit_name = unit_name
        super().__init__(path, f"unknown {kind} '{unit_name}'")


class UnknownFieldError(FormTreeError):
    """Raised when a validation group references a path that was not compiled."""

    def __init__(self, path: str):
        """
        Initialize the exception.

        Params:
            path: Dotted path that does not exist in the compiled specification
        """
        self.path = path
        super().__init__(f"Field '{path}' does not exist in the compiled specification")


class FormStateError(FormTreeError):
    """Raised when a form operation is called in the wrong lifecycle state."""

    def __init__(self, form: str | None, message: str):
        """
        Initialize the exception.

        Params:
            form: Name of the form
            message: Description of the lifecycle violation
        """
        self.form = form
        super().__init__(f"Form '{form}': {message}")


class UnsupportedObjectError(FormTreeError):
    """Raised when a form cannot extract the object it is asked to bind."""

    def __init__(self, form: str | None, object_type: str, hydrator: str | None):
        """
        Initialize the exception.

        Params:
            form: Name of the form
            object_type: Type name of the rejected object
            hydrator: Type name of the resolved hydrator, None when there is none
        """
        self.form = form
        self.object_type = object_type
        self.hydrator = hydrator
        reason = f"{hydrator} cannot extract it" if hydrator else "no hydrator is configured"
        super().__init__(f"Form '{form}' cannot bind a {object_type}: {reason}")


class AnnotationParseError(FormTreeError):
    """Raised when a docstring annotation line cannot be parsed."""

    def __init__(self, annotation: str, owner: str, reason: str):
        """
        Initialize the exception.

        Params:
            annotation: The annotation text as written
            owner: Class or class.field the annotation belongs to
            reason: Why it cannot be parsed
        """
        self.annotation = annotation
        self.owner = owner
        self.reason = reason
        super().__init__(f"Cannot parse annotation '{annotation}' in {owner}: {reason}")


class ConfigurationError(FormTreeError):
    """Raised when builder configuration contains unknown or malformed options."""

    pass


class IncompatibleRuntimeError(FormTreeError):
    """Raised when a metadata reader variant is not supported by the interpreter."""

    def __init__(self, variant: str, requirement: str):
        """
        Initialize the exception.

        Params:
            variant: Requested builder variant
            requirement: Runtime capability that is missing
        """
        self.variant = variant
        self.requirement = requirement
        super().__init__(f"Cannot create '{variant}': {requirement}")


class ServiceNotFoundError(FormTreeError):
    """Raised when a builder variant or element type name is unknown."""

    def __init__(self, name: str, available: list[str] | None = None):
        """
        Initialize the exception.

        Params:
            name: The requested service name
            available: Names that would have been accepted
        """
        self.name = name
        self.available = available or []
        message = f"Service '{name}' was not found"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


class ServiceNotCreatedError(FormTreeError):
    """Raised when a service was found but could not be created."""

    def __init__(self, message: str, service: str | None = None):
        """
        Initialize the exception.

        Params:
            message: Reason the service could not be created
            service: Name of the service being created
        """
        self.service = service
        super().__init__(message)
