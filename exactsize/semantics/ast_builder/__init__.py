"""
Schema builder module.

Exports:
    SchemaBuilder: Builds declared-type shapes from Lark parse trees
"""
from exactsize.semantics.ast_builder.builder import SchemaBuilder

__all__ = [
    'SchemaBuilder',
]
