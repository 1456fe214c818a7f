"""Host-side extractors that turn source code into marker occurrences."""

from .python_source import PythonSourceResolver, discover_sources, module_name_for

__all__ = ["PythonSourceResolver", "discover_sources", "module_name_for"]
