# semantics/passes/collect.py
"""Declaration collection: builds the schema's type table."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from exactsize.semantics.shapes import Schema, TypeDecl


@dataclass
class TypeTable:
    """Declared types by name, plus declaration order."""
    by_name: Dict[str, TypeDecl] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    def __contains__(self, name: str) -> bool:
        return name in self.by_name

    def get(self, name: str) -> Optional[TypeDecl]:
        return self.by_name.get(name)


class TypeCollector:
    """Collects declarations into a TypeTable.

    The first declaration of a name wins. Later declarations of the same name
    are kept in `duplicates` (by identity) so the driver can reject them with
    SZ0001 at their own location.
    """

    def __init__(self) -> None:
        self.table = TypeTable()
        self.duplicates: List[TypeDecl] = []

    def collect(self, schema: Schema) -> TypeTable:
        for decl in schema.decls:
            self._collect_decl(decl)
        return self.table

    def _collect_decl(self, decl: TypeDecl) -> None:
        if decl.name in self.table.by_name:
            self.duplicates.append(decl)
            return
        self.table.by_name[decl.name] = decl
        self.table.order.append(decl.name)

    def is_duplicate(self, decl: TypeDecl) -> bool:
        return any(d is decl for d in self.duplicates)
