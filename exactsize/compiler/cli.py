"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from exactsize.internals.version import print_banner, version_line


def print_manifest_info(manifest_path: Path) -> int:
    """Print the contents of a .szm size manifest.

    Returns:
        0 on success, 2 on error.
    """
    from exactsize.backend.manifest import SizeManifest, ManifestError

    if not manifest_path.exists():
        print(f"Error: file not found: {manifest_path}", file=sys.stderr)
        return 2

    try:
        payload = SizeManifest.read(manifest_path)
    except ManifestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"Schema: {payload.get('schema', '?')}")
    print(f"Compiler: {payload.get('compiler_version', '?')}")
    print(f"Generated: {payload.get('generated_at', '?')}")
    print()

    types = payload["types"]
    print(f"Types ({len(types)}):")
    for entry in types:
        print(f"  {entry['kind']} {entry['name']}: {describe_size(entry.get('exact_size'), entry.get('rejected', False))}")
    return 0


def describe_size(size, rejected: bool = False) -> str:
    if rejected:
        return "rejected"
    if size is None:
        return "not fixed"
    return f"{size} byte" if size == 1 else f"{size} bytes"


def main(argv: list[str] | None = None) -> int:
    """Main analyzer entry point."""
    ap = argparse.ArgumentParser(prog="exactsize",
                                 description="Exact encoded size analysis for codec schemas")

    ap.add_argument("source", nargs='?', help="Path to schema file")
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("--dump-parse", action="store_true", help="Print raw Lark tree")
    ap.add_argument("--dump-shapes", action="store_true", help="Print declared shapes")
    ap.add_argument("--emit-ll", metavar="OUT",
                    help="Write generated exact_size functions as LLVM IR to OUT")
    ap.add_argument("--dump-ll", action="store_true",
                    help="Dump generated LLVM IR to terminal")
    ap.add_argument("--manifest", metavar="OUT",
                    help="Write a binary size manifest (.szm) to OUT")
    ap.add_argument("--manifest-info", metavar="FILE",
                    help="Display the contents of a size manifest")
    ap.add_argument("--json", action="store_true",
                    help="Print results as JSON instead of text")
    args = ap.parse_args(argv)

    if args.version:
        print(version_line())
        return 0

    if not args.json:
        print_banner()

    if args.manifest_info:
        return print_manifest_info(Path(args.manifest_info))

    if not args.source:
        print("error: schema file required (unless using --manifest-info)", file=sys.stderr)
        return 2

    from exactsize.compiler.pipeline import analyze_file

    src_path = Path(args.source).resolve()
    try:
        result = analyze_file(src_path, dump_parse=args.dump_parse)
    except OSError as e:
        print(f"error: cannot read {src_path}: {e}", file=sys.stderr)
        return 2

    result.reporter.print()
    tally = result.reporter.summary()
    if tally:
        print(f"{src_path.name}: {tally}", file=sys.stderr)

    if result.schema is None:
        return result.exit_code

    if args.dump_shapes:
        for decl in result.schema.decls:
            print(decl)
        print()

    if args.json:
        print(json.dumps([
            {
                "name": r.decl.name,
                "kind": r.decl.kind,
                "exact_size": None if r.rejected else r.size,
                "rejected": r.rejected,
            }
            for r in result.results
        ], indent=2))
    else:
        for r in result.results:
            print(f"{r.decl.name}: {describe_size(r.size, r.rejected)}")

    if args.emit_ll or args.dump_ll:
        from exactsize.backend.codegen_llvm import LLVMSizeCodegen
        cg = LLVMSizeCodegen(module_name=src_path.stem)
        cg.build_module(result.results)
        if args.dump_ll:
            print(str(cg.module))
        if args.emit_ll:
            cg.write_ll(Path(args.emit_ll))

    if args.manifest:
        from exactsize.backend.manifest import SizeManifest
        payload = SizeManifest.build_payload(result.results, src_path.name)
        SizeManifest.write(Path(args.manifest), payload)

    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
