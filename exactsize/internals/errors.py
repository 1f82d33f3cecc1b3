# internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from exactsize.internals.report import Span, Reporter, Diagnostic


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    GENERAL   = "general"
    SYNTAX    = "syntax"
    DECL      = "declaration"
    ATTRIBUTE = "attribute"
    TYPE      = "type"
    VARIANT   = "variant"
    SHAPE     = "shape"
    MANIFEST  = "manifest"
    INTERNAL  = "internal"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    kind: str
    category: Category = Category.GENERAL
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)

def emit(r: Reporter, em: ErrorMessage, span: Optional[Span], **kwargs) -> None:
    text = _fmt(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text, span)
    else:
        r.warn(em.code, text, span)

def kind_of(d: Diagnostic) -> str:
    """Structural-error kind of a diagnostic (e.g. 'TooManyVariants')."""
    return _get(d.code).kind

def raise_internal_error(code: str, **kwargs) -> None:
    """Raise a RuntimeError for internal analyzer errors.

    Internal errors indicate analyzer bugs, not schema mistakes.

    Raises:
        RuntimeError: Always raises with formatted error message
    """
    text = _fmt(code, **kwargs)
    raise RuntimeError(f"{code}: {text}")


class StructuralError(Exception):
    """A declared type was rejected; carries every error found for it."""

    def __init__(self, type_name: str, diagnostics: Sequence[Diagnostic]):
        self.type_name = type_name
        self.diagnostics: List[Diagnostic] = [d for d in diagnostics if d.kind == "error"]
        if not self.diagnostics:
            raise_internal_error("SZ9001", message="StructuralError raised without errors")
        first = self.diagnostics[0]
        super().__init__(f"{first.code}: {first.message}")

    @property
    def kind(self) -> str:
        return kind_of(self.diagnostics[0])

    @property
    def kinds(self) -> List[str]:
        return [kind_of(d) for d in self.diagnostics]

    @property
    def span(self) -> Optional[Span]:
        return self.diagnostics[0].span


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None

#
# --- Registry population
#

# Declarations (SZ0001-SZ0099)
_add(ErrorMessage("SZ0001", Severity.ERROR,
    "type '{name}' is declared more than once",
    "DuplicateType", Category.DECL, "Every struct, enum and union name must be unique in a schema."))

_add(ErrorMessage("SZ0002", Severity.ERROR,
    "unknown type '{name}'",
    "UnknownType", Category.TYPE, "Field type is neither a builtin nor a type declared in the schema."))

_add(ErrorMessage("SZ0003", Severity.ERROR,
    "field '{field}' is declared more than once in '{owner}'",
    "DuplicateField", Category.DECL))

_add(ErrorMessage("SZ0004", Severity.ERROR,
    "variant '{variant}' is declared more than once in enum '{owner}'",
    "DuplicateVariant", Category.DECL))

_add(ErrorMessage("SZ0005", Severity.ERROR,
    "'{name}' expects {expected} type argument(s), got {got}",
    "GenericArity", Category.TYPE))

# Field modifiers (SZ0101-SZ0199)
_add(ErrorMessage("SZ0101", Severity.ERROR,
    "`encoded_as`, `compact` and `skip` can only be used one at a time",
    "ConflictingFieldModifiers", Category.ATTRIBUTE,
    "A field may carry at most one of the skip, compact and encoded_as modifiers."))

_add(ErrorMessage("SZ0102", Severity.ERROR,
    "type '{type}' has no compact encoding",
    "NotCompactable", Category.TYPE, "Only unsigned integers and () can be compact-encoded."))

_add(ErrorMessage("SZ0103", Severity.ERROR,
    "unknown codec attribute '{name}'",
    "UnknownAttribute", Category.ATTRIBUTE))

_add(ErrorMessage("SZ0104", Severity.ERROR,
    "invalid value for codec attribute '{name}': {reason}",
    "InvalidAttribute", Category.ATTRIBUTE))

_add(ErrorMessage("SZ0105", Severity.ERROR,
    "codec attribute '{name}' cannot be used on a variant",
    "MisplacedAttribute", Category.ATTRIBUTE, "Variants accept only `skip` and `index`."))

# Enums (SZ0201-SZ0299)
_add(ErrorMessage("SZ0201", Severity.ERROR,
    "currently only enums with at most 256 variants are encodable ('{name}' has {count})",
    "TooManyVariants", Category.VARIANT,
    "The discriminant is a single byte, so at most 256 variants can be addressed."))

# Shapes (SZ0301-SZ0399)
_add(ErrorMessage("SZ0301", Severity.ERROR,
    "union types are not supported ('{name}')",
    "UnsupportedShape", Category.SHAPE, "Only structs and enums have an encoding."))

# Sizes (SZ0401-SZ0499)
_add(ErrorMessage("SZ0401", Severity.ERROR,
    "encoded size of '{name}' ({size} bytes) does not fit in 64 bits",
    "SizeOverflow", Category.SHAPE,
    "Exact sizes are reported as u64; a larger fixed size cannot be represented."))

# Manifest files (SZ3500-SZ3599)
_add(ErrorMessage("SZ3501", Severity.ERROR,
    "'{path}' is not a size manifest (bad magic)",
    "ManifestFormat", Category.MANIFEST))

_add(ErrorMessage("SZ3502", Severity.ERROR,
    "'{path}' has manifest version {version}; supported version is {supported}",
    "ManifestVersion", Category.MANIFEST))

_add(ErrorMessage("SZ3503", Severity.ERROR,
    "'{path}' is truncated in {section} (expected {expected} bytes, got {actual})",
    "ManifestTruncated", Category.MANIFEST))

_add(ErrorMessage("SZ3504", Severity.ERROR,
    "'{path}' has an unreadable payload: {reason}",
    "ManifestPayload", Category.MANIFEST))

# Syntax (SZ0901)
_add(ErrorMessage("SZ0901", Severity.ERROR,
    "syntax error: {message}",
    "SyntaxError", Category.SYNTAX))

# Warnings (SZ1001+)
_add(ErrorMessage("SZ1001", Severity.WARNING,
    "enum '{name}' has no encodable variants and no fixed size",
    "EmptyEnum", Category.VARIANT))

# Internal errors (SZ9001+)
_add(ErrorMessage("SZ9001", Severity.ERROR,
    "internal invariant violated: {message}",
    "Internal", Category.INTERNAL, "Analyzer bug, not a schema mistake."))

_add(ErrorMessage("SZ9002", Severity.ERROR,
    "unknown type node '{node}'",
    "Internal", Category.INTERNAL, "Found an unexpected type node while sizing."))
