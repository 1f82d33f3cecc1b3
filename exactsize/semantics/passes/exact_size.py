"""
Exact-size pass: decides whether every value of a declared type encodes to the
same number of bytes.

One `ExactSizeAnalysis` is one invocation for one declared type:

    struct  -> sum of field sizes, unknown as soon as one field is unknown
    enum    -> 1 (discriminant only) when every counted variant is empty-like,
               otherwise unknown
    union   -> rejected (SZ0301)

Structural validation (modifier exclusivity, type references, compact
support) runs on every field unconditionally. Only the numeric sum
short-circuits, so a conflict on a late field is still reported after an
earlier field already made the size unknown.
"""

from __future__ import annotations
from typing import Callable, Iterable, Optional, Set

from exactsize.internals.report import Reporter, Span
from exactsize.internals import errors as er
from exactsize.internals.errors import ERR, StructuralError
from exactsize.semantics.error_reporter import PassErrorReporter
from exactsize.semantics.shapes import (
    TypeDecl, FieldDescriptor, ModifierKind, StructShape, EnumShape, UnionShape,
)
from exactsize.semantics.typesys import (
    Type, GenericType, TupleType, ArrayType, named_types_in, is_known_generic, GENERIC_ARITY,
)
from exactsize.semantics.type_sizes import SizeResult, TypeSizer, is_compactable

# Single-byte discriminant
MAX_VARIANTS = 256
# Sizes are handed to codecs and generated code as u64
MAX_EXACT_SIZE = 2**64 - 1


class ExactSizeAnalysis:
    """Computes the exact size of one declared type.

    Args:
        decl: The declaration to analyze.
        sizer: Sizes type expressions; resolves references to other declarations.
        is_declared: Tells whether a name is a declared type of the schema.
        filename: Used for diagnostics.
    """

    def __init__(
        self,
        decl: TypeDecl,
        sizer: TypeSizer,
        is_declared: Callable[[str], bool],
        filename: str = "<input>",
    ) -> None:
        self.decl = decl
        self.sizer = sizer
        self.is_declared = is_declared
        self.reporter = Reporter(filename=filename)
        self.reporter.extend(decl.diagnostics)
        self.err = PassErrorReporter(self.reporter)

    @property
    def diagnostics(self):
        return list(self.reporter.items)

    def run(self) -> SizeResult:
        """Analyze the declaration.

        Returns:
            The exact size in bytes, or None when it depends on the value.

        Raises:
            StructuralError: The declaration's shape is invalid.
        """
        shape = self.decl.shape
        if isinstance(shape, UnionShape):
            self.err.emit(ERR.SZ0301, self.decl.loc, name=self.decl.name)
            size = None
        elif isinstance(shape, StructShape):
            size = self.compose_struct(shape.fields)
        elif isinstance(shape, EnumShape):
            size = self.compose_enum(shape)
        else:
            er.raise_internal_error("SZ9001", message=f"unknown shape {type(shape).__name__}")

        if size is not None and size > MAX_EXACT_SIZE:
            self.err.emit(ERR.SZ0401, self.decl.loc, name=self.decl.name, size=size)
            size = None

        if self.reporter.has_errors:
            raise StructuralError(self.decl.name, self.reporter.items)
        return size

    # ------------------------------------------------------------------
    # Per-field size resolver
    # ------------------------------------------------------------------

    def resolve_field(self, field: FieldDescriptor) -> SizeResult:
        """Byte contribution of one field, or None when not fixed."""
        if not self.validate_field(field):
            return None
        return self._field_size(field)

    def validate_field(self, field: FieldDescriptor) -> bool:
        """Run every structural check on a field. Returns False if any failed."""
        errors_before = self.err.error_count

        if field.has_conflicting_modifiers:
            self.err.emit(ERR.SZ0101, field.loc)

        self._validate_type(field.declared_type, field.loc)
        for modifier in field.active_modifiers:
            if modifier.kind is ModifierKind.ENCODED_AS:
                self._validate_type(modifier.alternate, modifier.loc or field.loc)
            elif modifier.kind is ModifierKind.COMPACT and not is_compactable(field.declared_type):
                self.err.emit(ERR.SZ0102, modifier.loc or field.loc, type=field.declared_type)

        return self.err.error_count == errors_before

    def _field_size(self, field: FieldDescriptor) -> SizeResult:
        modifier = field.modifier
        if modifier.kind is ModifierKind.SKIP:
            return 0
        if modifier.kind is ModifierKind.COMPACT:
            return self.sizer.compact_size_of(field.declared_type)
        if modifier.kind is ModifierKind.ENCODED_AS:
            return self.sizer.size_of(modifier.alternate)
        return self.sizer.size_of(field.declared_type)

    def _validate_type(self, ty: Type, span: Optional[Span]) -> None:
        for named in named_types_in(ty):
            if not self.is_declared(named.name):
                self.err.emit(ERR.SZ0002, span, name=named.name)
        for generic in _generics_in(ty):
            if not is_known_generic(generic.name):
                self.err.emit(ERR.SZ0002, span, name=generic.name)
                continue
            expected = GENERIC_ARITY[generic.name]
            if len(generic.args) != expected:
                self.err.emit(ERR.SZ0005, span, name=generic.name,
                              expected=expected, got=len(generic.args))
            elif generic.name == "Compact" and not is_compactable(generic.args[0]):
                self.err.emit(ERR.SZ0102, span, type=generic.args[0])

    # ------------------------------------------------------------------
    # Struct size composer
    # ------------------------------------------------------------------

    def compose_struct(self, fields: Iterable[FieldDescriptor]) -> SizeResult:
        fields = tuple(fields)
        self._check_duplicate_fields(fields, self.decl.name)

        total: SizeResult = 0
        for field in fields:
            valid = self.validate_field(field)
            if total is None:
                continue
            if not valid:
                total = None
                continue
            part = self._field_size(field)
            total = None if part is None else total + part
        return total

    def _check_duplicate_fields(self, fields: tuple[FieldDescriptor, ...], owner: str) -> None:
        seen: Set[str] = set()
        for field in fields:
            if field.name is None:
                continue
            if field.name in seen:
                self.err.emit(ERR.SZ0003, field.loc, field=field.name, owner=owner)
            seen.add(field.name)

    # ------------------------------------------------------------------
    # Enum shape classifier
    # ------------------------------------------------------------------

    def compose_enum(self, shape: EnumShape) -> SizeResult:
        seen: Set[str] = set()
        for variant in shape.variants:
            if variant.name in seen:
                self.err.emit(ERR.SZ0004, variant.loc, variant=variant.name, owner=self.decl.name)
            seen.add(variant.name)
            self._check_duplicate_fields(variant.fields, f"{self.decl.name}::{variant.name}")
            for field in variant.fields:
                self.validate_field(field)

        counted = shape.counted_variants
        if len(counted) > MAX_VARIANTS:
            self.err.emit(ERR.SZ0201, shape.variants_loc or self.decl.loc,
                          name=self.decl.name, count=len(counted))
            return None

        if not counted:
            self.err.emit(ERR.SZ1001, self.decl.loc, name=self.decl.name)
            return None

        if all(variant.is_empty_like for variant in counted):
            return 1
        return None


def _generics_in(ty: Type) -> list[GenericType]:
    if isinstance(ty, GenericType):
        found = [ty]
        for arg in ty.args:
            found.extend(_generics_in(arg))
        return found
    if isinstance(ty, TupleType):
        found = []
        for element in ty.elements:
            found.extend(_generics_in(element))
        return found
    if isinstance(ty, ArrayType):
        return _generics_in(ty.base_type)
    return []
