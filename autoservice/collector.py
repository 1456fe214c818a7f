"""Collector: turns marker occurrences into a Grouping.

For each class carrying the marker:
- read the declared interface list and reject empty or missing ones
- resolve each interface to its class declaration
- optionally verify the class really implements it
- file the implementer's binary name under the interface's binary name

The first violation aborts the round. Nothing is written for a round that
fails here because emission only starts once collection has returned.
"""

from collections.abc import Callable, Iterable, Sequence

from autoservice.errors import (
    EmptyInterfaceSet,
    MissingArgument,
    NotAnImplementer,
    UnresolvedInterface,
)
from autoservice.model import OBJECT, Declaration, Grouping, MarkerOccurrence, QualifiedName, TypeRef
from autoservice.naming import binary_name, closest_class
from autoservice.utils.constants import MARKER_VALUE_ARGUMENT

LogFn = Callable[[str], None]


def _silent(message: str) -> None:
    pass


def collect(
    occurrences: Iterable[MarkerOccurrence],
    grouping: Grouping | None = None,
    *,
    verify: bool = False,
    log: LogFn | None = None,
) -> Grouping:
    """Collect every occurrence of the round into a grouping.

    Args:
        occurrences: All marker occurrences visible in this round
        grouping: Accumulator to fill; a fresh one is created when omitted
        verify: Check that implementers really implement their interfaces
        log: Diagnostic sink for grouping decisions

    Returns:
        The filled grouping

    Raises:
        MissingArgument, EmptyInterfaceSet, UnresolvedInterface,
        NotAnImplementer, UnsupportedDeclarationKind
    """
    if grouping is None:
        grouping = Grouping()
    log = log or _silent

    for occurrence in occurrences:
        declaration = occurrence.declaration
        if not declaration.is_class:
            log(f"Skipping {declaration.name.dotted}: only classes can be service providers")
            continue

        for ref in interface_arguments(occurrence):
            interface = closest_class(ref)
            if interface is None:
                raise UnresolvedInterface(ref.name.dotted, declaration.location)

            if not check_implementer(declaration, interface, verify=verify):
                raise NotAnImplementer(
                    declaration.name.dotted, interface.dotted, declaration.location
                )

            implementer = binary_name(declaration)
            log(f"{implementer} provides {interface.binary} ({declaration.source_unit.path})")
            grouping.put(interface.binary, implementer, declaration.source_unit)

    return grouping


def interface_arguments(occurrence: MarkerOccurrence) -> Sequence[TypeRef]:
    """Extract the non-empty interface list from a marker occurrence."""
    declaration = occurrence.declaration
    arguments = occurrence.arguments
    if arguments is None or MARKER_VALUE_ARGUMENT not in arguments:
        raise MissingArgument(declaration.name.dotted, declaration.location)

    value = arguments[MARKER_VALUE_ARGUMENT]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, TypeRef) for v in value):
        raise MissingArgument(declaration.name.dotted, declaration.location)

    if not value:
        raise EmptyInterfaceSet(declaration.name.dotted, declaration.location)
    return value


def check_implementer(declaration: Declaration, interface: QualifiedName, *, verify: bool) -> bool:
    """Return True if ``declaration`` may be registered for ``interface``.

    With verification off the declaration is trusted as written.
    """
    if not verify:
        return True
    return (
        interface == declaration.name
        or interface == OBJECT
        or interface in declaration.supertypes
    )
