"""Whole-schema driver for the exact-size pass.

Runs one ExactSizeAnalysis per declared type. Analyses are memoized by name
within one SchemaAnalyzer so a type referenced from many fields is sized once;
nothing is shared between analyzers.

API:
    from exactsize.semantics.analyzer import SchemaAnalyzer
    analyzer = SchemaAnalyzer(schema, reporter)
    for result in analyzer.run():
        print(result.decl.name, result.size)
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from exactsize.internals.report import Diagnostic, Reporter
from exactsize.internals import errors as er
from exactsize.internals.errors import ERR, StructuralError
from exactsize.semantics.shapes import Schema, TypeDecl
from exactsize.semantics.type_sizes import SizeResult, TypeSizer
from exactsize.semantics.passes.collect import TypeCollector, TypeTable
from exactsize.semantics.passes.exact_size import ExactSizeAnalysis


@dataclass
class SizeAnalysis:
    """Outcome of analyzing one declared type."""
    decl: TypeDecl
    size: SizeResult = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def rejected(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)

    @property
    def is_fixed(self) -> bool:
        return not self.rejected and self.size is not None


class SchemaAnalyzer:
    def __init__(self, schema: Schema, reporter: Optional[Reporter] = None) -> None:
        self.schema = schema
        self.reporter = reporter or Reporter(filename=schema.filename)
        self.collector = TypeCollector()
        self.table: TypeTable = self.collector.collect(schema)
        self.sizer = TypeSizer(self.size_of_decl)
        self._results: Dict[str, SizeAnalysis] = {}
        self._in_progress: Set[str] = set()

    def size_of_decl(self, name: str) -> SizeResult:
        """Exact size of a declared type by name, for use from field sizing.

        A type that is still being analyzed refers to itself by value and has
        no fixed size. Rejected types contribute no fixed size either; their
        errors are reported once, at their own declaration.
        """
        if name in self._in_progress:
            return None
        decl = self.table.get(name)
        if decl is None:
            return None
        result = self.analyze(decl)
        return None if result.rejected else result.size

    def analyze(self, decl: TypeDecl) -> SizeAnalysis:
        if self.collector.is_duplicate(decl):
            local = Reporter(filename=self.schema.filename)
            local.extend(decl.diagnostics)
            er.emit(local, ERR.SZ0001, decl.loc, name=decl.name)
            return SizeAnalysis(decl, None, list(local.items))

        cached = self._results.get(decl.name)
        if cached is not None:
            return cached

        self._in_progress.add(decl.name)
        analysis = ExactSizeAnalysis(decl, self.sizer, self.table.__contains__, self.schema.filename)
        try:
            size = analysis.run()
        except StructuralError:
            size = None
        finally:
            self._in_progress.discard(decl.name)

        result = SizeAnalysis(decl, size, analysis.diagnostics)
        self._results[decl.name] = result
        return result

    def run(self) -> List[SizeAnalysis]:
        """Analyze every declaration; diagnostics go to the reporter in source order."""
        results = [self.analyze(decl) for decl in self.schema.decls]
        for result in results:
            self.reporter.extend(result.diagnostics)
        return results


def exact_size(decl: TypeDecl, types: Iterable[TypeDecl] = ()) -> SizeResult:
    """Exact encoded size of `decl`, or None when it varies by value.

    Args:
        decl: The type to analyze.
        types: Other declarations that `decl` may reference by name.

    Raises:
        StructuralError: `decl` has an invalid shape.
    """
    others = tuple(t for t in types if t.name != decl.name)
    analyzer = SchemaAnalyzer(Schema((decl,) + others))
    result = analyzer.analyze(decl)
    if result.rejected:
        raise StructuralError(decl.name, result.diagnostics)
    return result.size
