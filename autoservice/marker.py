"""The ``auto_service`` marker.

    from autoservice import auto_service

    @auto_service(Codec)
    class JsonCodec(Codec):
        ...

At runtime the decorator only records the interfaces on the class. The build
step (``autoservice generate``) finds the decorator in source and writes
``META-INF/services/<interface>`` manifests.
"""

INTERFACES_ATTR = "__autoservice_interfaces__"


def auto_service(*interfaces):
    """Mark a class as a provider of one or more service interfaces."""
    if not interfaces:
        raise TypeError("auto_service() requires at least one service interface")

    def decorator(cls):
        if not isinstance(cls, type):
            raise TypeError(f"auto_service can only decorate classes, got {cls!r}")
        declared = cls.__dict__.get(INTERFACES_ATTR, ())
        setattr(cls, INTERFACES_ATTR, tuple(declared) + interfaces)
        return cls

    return decorator
