"""Schema analysis orchestration: source text to per-type size results."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from exactsize.internals.parser import parse_or_report
from exactsize.internals.report import Reporter
from exactsize.semantics.analyzer import SchemaAnalyzer, SizeAnalysis
from exactsize.semantics.shapes import Schema


@dataclass
class PipelineResult:
    reporter: Reporter
    schema: Optional[Schema] = None
    results: List[SizeAnalysis] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """0 = clean, 1 = warnings only, 2 = errors."""
        return self.reporter.exit_code()

    def sizes(self) -> dict[str, Optional[int]]:
        """Name to exact size for every accepted type."""
        return {r.decl.name: r.size for r in self.results if not r.rejected}


def analyze_source(src: str, filename: str = "<input>", dump_parse: bool = False) -> PipelineResult:
    """Parse and analyze schema source.

    Syntax errors stop the pipeline before analysis; structural errors are
    per type and never stop the other types from being analyzed.
    """
    reporter = Reporter(source=src, filename=filename)
    schema = parse_or_report(src, reporter, dump_parse=dump_parse)
    if schema is None:
        return PipelineResult(reporter)

    results = SchemaAnalyzer(schema, reporter).run()
    return PipelineResult(reporter, schema, results)


def analyze_file(path: Path, dump_parse: bool = False) -> PipelineResult:
    src = path.read_text(encoding="utf-8")
    return analyze_source(src, filename=str(path), dump_parse=dump_parse)
