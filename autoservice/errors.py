"""Exceptions raised while processing service registrations.

Every error here is fatal for the whole round. A partially correct manifest
is worse than a failed build: a runtime ServiceLoader would silently miss
providers, so nothing is skipped and nothing is retried.
"""

from typing import Any


class ServiceProcessingError(Exception):
    """Base class for all round-aborting failures.

    Attributes:
        location: Optional SourceLocation of the offending declaration
    """

    def __init__(self, message: str, location: Any | None = None):
        if location is not None:
            message = f"{location}: {message}"
        super().__init__(message)
        self.location = location


class MissingArgument(ServiceProcessingError):
    """The marker has no interface list argument."""

    def __init__(self, declaration: str, location: Any | None = None):
        super().__init__(f"No 'value' member value found on marker of {declaration}", location)
        self.declaration = declaration


class EmptyInterfaceSet(ServiceProcessingError):
    """The marker declares zero service interfaces."""

    def __init__(self, declaration: str, location: Any | None = None):
        super().__init__(f"No service interfaces provided for element! {declaration}", location)
        self.declaration = declaration


class NotAnImplementer(ServiceProcessingError):
    """A declared interface is missing from the implementer's supertypes.

    Only raised when verification is enabled.
    """

    def __init__(self, implementer: str, interface: str, location: Any | None = None):
        super().__init__(
            "ServiceProviders must implement their service provider interface. "
            f"{implementer} does not implement {interface}",
            location,
        )
        self.implementer = implementer
        self.interface = interface


class UnresolvedInterface(ServiceProcessingError):
    """A declared interface does not resolve to any class declaration."""

    def __init__(self, reference: str, location: Any | None = None):
        super().__init__(f"Service interface {reference} is not a class", location)
        self.reference = reference


class UnsupportedDeclarationKind(ServiceProcessingError):
    """Local and anonymous classes have no stable binary name."""

    def __init__(self, declaration: str, kind: str, location: Any | None = None):
        super().__init__(
            f"Local/anonymous classes are not supported! {declaration} is a {kind}",
            location,
        )
        self.declaration = declaration
        self.kind = kind


class ArtifactWriteFailure(ServiceProcessingError):
    """Creating or writing a manifest failed.

    Attributes:
        path: Artifact path relative to the output root
        cause: Underlying exception
    """

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Unable to create {path}, {cause}")
        self.path = path
        self.cause = cause


class SourceParseError(ServiceProcessingError):
    """A source unit could not be parsed by the Python host."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Unable to parse {path}: {cause}")
        self.path = path
        self.cause = cause


class ProcessorStateError(ServiceProcessingError):
    """The processor lifecycle was driven out of order."""
