"""
Test metadata parsing for the schema fixture suite.

Schema fixtures under tests/schemas/ state their expected analysis outcome in
comment directives at the top of the file:

    // EXPECT_SIZE: Header=12
    // EXPECT_SIZE: Status=none
    // EXPECT_SIZE: Raw=rejected
    // EXPECT_ERROR: SZ0301
    // EXPECT_STDOUT_CONTAINS: "Header: 12 bytes"

The expected exit code comes from the file name, as for the compiler suite:
test_*.schema → 0, test_warn_*.schema → 1, test_err_*.schema → 2.
"""

import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from pathlib import Path

REJECTED = "rejected"


@dataclass
class CaseMetadata:
    """Expectations for one schema fixture."""

    # Type name → exact size (None = not fixed); rejected types listed separately
    expect_sizes: Dict[str, Optional[int]] = field(default_factory=dict)
    expect_rejected: List[str] = field(default_factory=list)
    expect_errors: List[str] = field(default_factory=list)
    expect_stdout_contains: List[str] = field(default_factory=list)
    expect_exit: int = 0


def get_expected_exit_code(test_file: Path) -> int:
    """Expected exit code from the file name convention."""
    name = test_file.name
    if name.startswith("test_warn_"):
        return 1
    if name.startswith("test_err_"):
        return 2
    return 0


def _unquote(value: str) -> str:
    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return value.replace('\\n', '\n').replace('\\t', '\t')


def parse_case_metadata(test_file: Path) -> CaseMetadata:
    """
    Parse directives from the first 30 lines of a schema fixture.

    Args:
        test_file: Path to the .schema fixture

    Returns:
        CaseMetadata with parsed expectations
    """
    metadata = CaseMetadata(expect_exit=get_expected_exit_code(test_file))

    header_lines = test_file.read_text(encoding="utf-8").split("\n")[:30]

    for line in header_lines:
        line = line.strip()
        if not line.startswith("//"):
            continue

        directive = line[2:].strip()

        if directive.startswith("EXPECT_SIZE:"):
            value = directive.split(":", 1)[1].strip()
            name, _, size = value.partition("=")
            name, size = name.strip(), size.strip()
            if size == REJECTED:
                metadata.expect_rejected.append(name)
            elif size == "none":
                metadata.expect_sizes[name] = None
            else:
                try:
                    metadata.expect_sizes[name] = int(size)
                except ValueError:
                    print(f"Warning: Invalid EXPECT_SIZE value in {test_file}: {value}", file=sys.stderr)

        elif directive.startswith("EXPECT_ERROR:"):
            metadata.expect_errors.append(directive.split(":", 1)[1].strip())

        elif directive.startswith("EXPECT_STDOUT_CONTAINS:"):
            metadata.expect_stdout_contains.append(_unquote(directive.split(":", 1)[1].strip()))

    return metadata
