"""Binary size manifest (.szm) for analyzed schemas.

A manifest records the analysis outcome of every declared type so codecs and
build tooling can look sizes up without re-parsing the schema.

File format (version 1):

    ┌─────────────────────────────────────────────────────────────┐
    │ MAGIC (8 bytes): b"EXSZMAN\0"                               │
    ├─────────────────────────────────────────────────────────────┤
    │ VERSION (4 bytes): uint32 LE                                │
    ├─────────────────────────────────────────────────────────────┤
    │ PAYLOAD_LENGTH (8 bytes): uint64 LE                         │
    ├─────────────────────────────────────────────────────────────┤
    │ PAYLOAD (N bytes): MessagePack-encoded dict                 │
    └─────────────────────────────────────────────────────────────┘

Payload:
    {
        "schema": str,
        "compiler_version": str,
        "generated_at": ISO-8601 str,
        "types": [{"name": str, "kind": str, "exact_size": u64 | None,
                   "rejected": bool}, ...],
    }
"""
from __future__ import annotations

import datetime
import struct
from pathlib import Path
from typing import BinaryIO, Iterable

import msgpack

from exactsize.internals.errors import ERR
from exactsize.semantics.analyzer import SizeAnalysis


class ManifestError(Exception):
    """Raised for unreadable or incompatible manifest files."""

    def __init__(self, code: str, **kwargs):
        self.code = code
        self.kwargs = kwargs
        msg = ERR[code]
        self.message = msg.text.format(**kwargs)
        super().__init__(f"{code}: {self.message}")


def _read_bytes(f: BinaryIO, size: int, path: str, section: str) -> bytes:
    """Read exact number of bytes with truncation detection.

    Raises:
        ManifestError: SZ3503 if truncated.
    """
    data = f.read(size)
    if len(data) != size:
        raise ManifestError("SZ3503", path=path, section=section, expected=size, actual=len(data))
    return data


class SizeManifest:
    """Binary format reader/writer for .szm files."""

    MAGIC = b"EXSZMAN\x00"
    VERSION = 1
    FIXED_HEADER_SIZE = 20  # 8 (magic) + 4 (version) + 8 (payload length)

    @staticmethod
    def build_payload(results: Iterable[SizeAnalysis], schema_name: str) -> dict:
        from exactsize import __version__

        return {
            "schema": schema_name,
            "compiler_version": __version__,
            "generated_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "types": [
                {
                    "name": r.decl.name,
                    "kind": r.decl.kind,
                    "exact_size": None if r.rejected else r.size,
                    "rejected": r.rejected,
                }
                for r in results
            ],
        }

    @staticmethod
    def write(output_path: Path, payload: dict) -> None:
        blob = msgpack.packb(payload, use_bin_type=True)
        with open(output_path, "wb") as f:
            f.write(SizeManifest.MAGIC)
            f.write(struct.pack("<I", SizeManifest.VERSION))
            f.write(struct.pack("<Q", len(blob)))
            f.write(blob)

    @staticmethod
    def read(input_path: Path) -> dict:
        """Read and validate a manifest.

        Raises:
            ManifestError: SZ3501-SZ3504 for format errors.
        """
        path = str(input_path)
        with open(input_path, "rb") as f:
            magic = _read_bytes(f, len(SizeManifest.MAGIC), path, "header")
            if magic != SizeManifest.MAGIC:
                raise ManifestError("SZ3501", path=path)

            version = struct.unpack("<I", _read_bytes(f, 4, path, "header"))[0]
            if version != SizeManifest.VERSION:
                raise ManifestError("SZ3502", path=path, version=version,
                                    supported=SizeManifest.VERSION)

            payload_len = struct.unpack("<Q", _read_bytes(f, 8, path, "header"))[0]
            blob = _read_bytes(f, payload_len, path, "payload")

        try:
            payload = msgpack.unpackb(blob, raw=False)
        except ValueError as e:
            raise ManifestError("SZ3504", path=path, reason=str(e))
        if not isinstance(payload, dict) or not isinstance(payload.get("types"), list):
            raise ManifestError("SZ3504", path=path, reason="missing 'types' table")
        return payload
