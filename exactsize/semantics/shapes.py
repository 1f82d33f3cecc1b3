"""Structural shapes of declared types.

One declared type becomes one `TypeDecl` holding a `Shape`:

    StructShape(fields)            product type, fields in declaration order
    EnumShape(variants)            sum type, single-byte discriminant
    UnionShape(fields)             overlapping fields, never encodable

Fields carry the codec modifiers recognized on them. A field normally has
zero or one modifier; a field with several is still representable so the
size pass can reject it with a located diagnostic instead of silently
picking one.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from exactsize.internals.report import Span, Diagnostic
from exactsize.semantics.typesys import Type


class ModifierKind(Enum):
    NONE = "none"
    SKIP = "skip"
    COMPACT = "compact"
    ENCODED_AS = "encoded_as"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FieldModifier:
    kind: ModifierKind
    alternate: Optional[Type] = None  # only for ENCODED_AS
    loc: Optional[Span] = None

    def __post_init__(self) -> None:
        if (self.kind is ModifierKind.ENCODED_AS) != (self.alternate is not None):
            raise ValueError("alternate type is required for encoded_as and only for encoded_as")

    @classmethod
    def skip(cls, loc: Optional[Span] = None) -> "FieldModifier":
        return cls(ModifierKind.SKIP, loc=loc)

    @classmethod
    def compact(cls, loc: Optional[Span] = None) -> "FieldModifier":
        return cls(ModifierKind.COMPACT, loc=loc)

    @classmethod
    def encoded_as(cls, alternate: Type, loc: Optional[Span] = None) -> "FieldModifier":
        return cls(ModifierKind.ENCODED_AS, alternate=alternate, loc=loc)

    def __str__(self) -> str:
        if self.kind is ModifierKind.ENCODED_AS:
            return f"encoded_as = \"{self.alternate}\""
        return str(self.kind)


NO_MODIFIER = FieldModifier(ModifierKind.NONE)


@dataclass(frozen=True)
class FieldDescriptor:
    declared_type: Type
    modifiers: tuple[FieldModifier, ...] = ()
    name: Optional[str] = None  # None for tuple-style fields
    loc: Optional[Span] = None

    @property
    def active_modifiers(self) -> tuple[FieldModifier, ...]:
        return tuple(m for m in self.modifiers if m.kind is not ModifierKind.NONE)

    @property
    def has_conflicting_modifiers(self) -> bool:
        return len(self.active_modifiers) > 1

    @property
    def modifier(self) -> FieldModifier:
        """The single active modifier, or NO_MODIFIER.

        Only meaningful once `has_conflicting_modifiers` has been ruled out.
        """
        active = self.active_modifiers
        return active[0] if len(active) == 1 else NO_MODIFIER

    @property
    def is_skipped(self) -> bool:
        return any(m.kind is ModifierKind.SKIP for m in self.active_modifiers) \
            and not self.has_conflicting_modifiers

    def __str__(self) -> str:
        mods = "".join(f"#[codec({m})] " for m in self.active_modifiers)
        prefix = f"{self.name}: " if self.name is not None else ""
        return f"{mods}{prefix}{self.declared_type}"


@dataclass(frozen=True)
class Variant:
    name: str
    fields: tuple[FieldDescriptor, ...] = ()
    skipped: bool = False  # `#[codec(skip)]` on the whole variant
    loc: Optional[Span] = None

    @property
    def is_empty_like(self) -> bool:
        """No fields, or every field is skip-modified."""
        return all(f.is_skipped for f in self.fields)

    def __str__(self) -> str:
        prefix = "#[codec(skip)] " if self.skipped else ""
        if not self.fields:
            return f"{prefix}{self.name}"
        return f"{prefix}{self.name}(" + ", ".join(str(f) for f in self.fields) + ")"


@dataclass(frozen=True)
class StructShape:
    fields: tuple[FieldDescriptor, ...] = ()
    fields_loc: Optional[Span] = None


@dataclass(frozen=True)
class EnumShape:
    variants: tuple[Variant, ...] = ()
    variants_loc: Optional[Span] = None

    @property
    def counted_variants(self) -> tuple[Variant, ...]:
        return tuple(v for v in self.variants if not v.skipped)


@dataclass(frozen=True)
class UnionShape:
    fields: tuple[FieldDescriptor, ...] = ()


Shape = Union[StructShape, EnumShape, UnionShape]


@dataclass(frozen=True)
class TypeDecl:
    name: str
    shape: Shape
    loc: Optional[Span] = None
    # Attribute problems found while building this declaration from source
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def kind(self) -> str:
        if isinstance(self.shape, StructShape):
            return "struct"
        if isinstance(self.shape, EnumShape):
            return "enum"
        return "union"

    def __str__(self) -> str:
        if isinstance(self.shape, EnumShape):
            body = ", ".join(str(v) for v in self.shape.variants)
        else:
            body = ", ".join(str(f) for f in self.shape.fields)
        return f"{self.kind} {self.name} {{ {body} }}"


@dataclass(frozen=True)
class Schema:
    """Every declaration of one schema source, in source order."""
    decls: tuple[TypeDecl, ...] = ()
    filename: str = "<input>"
