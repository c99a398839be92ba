"""Schema generation for trellis descriptors.

- `SchemaCompiler` turns type descriptors into `components.schemas` entries
- `OpenApi3Generator` renders a whole `ApiDescriptor` as an OpenAPI 3 document
"""

from .compiler import CompilationSession, SchemaCompiler, SchemaDocument
from .openapi import OpenApi3Generator

__all__ = [
    "CompilationSession",
    "OpenApi3Generator",
    "SchemaCompiler",
    "SchemaDocument",
]
