"""Python source indexing: syntax nodes, scopes and static types."""
from .python_index import PythonModuleIndex, parse_source
from .type_resolver import PythonTypeResolver

__all__ = ['PythonModuleIndex', 'PythonTypeResolver', 'parse_source']
