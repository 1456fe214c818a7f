"""autoservice - ServiceLoader manifest generation from decorated Python classes."""

__version__ = "1.0.0"

from autoservice.marker import auto_service

__all__ = ["__version__", "auto_service"]
