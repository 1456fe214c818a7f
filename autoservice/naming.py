"""Binary-name computation for marker declarations."""

from autoservice.errors import UnsupportedDeclarationKind
from autoservice.model import Declaration, DeclarationKind, QualifiedName, TypeRef

UNSUPPORTED_KINDS = frozenset({DeclarationKind.LOCAL_CLASS, DeclarationKind.ANONYMOUS_CLASS})


def binary_name(declaration: Declaration) -> str:
    """Return the binary name of a declaration.

    For example ``com.google.Foo$Bar`` instead of ``com.google.Foo.Bar``. This
    is the exact string a class loader requests, so nested classes must use
    ``$`` while the package keeps its dots.

    Raises:
        UnsupportedDeclarationKind: For local and anonymous classes
    """
    if declaration.kind in UNSUPPORTED_KINDS:
        raise UnsupportedDeclarationKind(
            declaration.name.dotted, declaration.kind.value, declaration.location
        )
    return declaration.name.binary


def closest_class(ref: TypeRef) -> QualifiedName | None:
    """Resolve a type reference to its nearest class declaration.

    Aliases are followed to their target, type arguments are dropped and a
    reference to a non-class member resolves to the class enclosing it. A
    top-level non-class target has no class declaration and yields None.
    """
    while ref.alias_of is not None:
        ref = ref.alias_of
    if ref.is_class:
        return ref.name
    return ref.name.enclosing()
