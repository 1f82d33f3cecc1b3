"""
Tests for the exact-size pass on programmatically built shapes.

These tests verify:
1. Struct sizes are the sum of field sizes, unknown once any field is unknown
2. Field modifiers (skip, compact, encoded_as) and their exclusivity
3. Enum classification: discriminant-only enums, variant limits, skipped variants
4. Unions are rejected
5. Repeated analysis of the same shape gives the same outcome
"""

import pytest

from exactsize.internals.errors import StructuralError
from exactsize.internals.report import Span
from exactsize.semantics.analyzer import SchemaAnalyzer, exact_size
from exactsize.semantics.passes.exact_size import ExactSizeAnalysis
from exactsize.semantics.shapes import (
    EnumShape,
    FieldDescriptor,
    FieldModifier,
    Schema,
    StructShape,
    TypeDecl,
    UnionShape,
    Variant,
)
from exactsize.semantics.type_sizes import TypeSizer
from exactsize.semantics.typesys import (
    UNIT,
    ArrayType,
    BuiltinType,
    GenericType,
    NamedType,
    TupleType,
)

U8 = BuiltinType.U8
U32 = BuiltinType.U32
U64 = BuiltinType.U64
VEC_U8 = GenericType("Vec", (U8,))


# =============================================================================
# HELPERS
# =============================================================================

def field(ty, *modifiers, name=None, loc=None):
    return FieldDescriptor(ty, tuple(modifiers), name=name, loc=loc)


def struct(name, *fields):
    return TypeDecl(name, StructShape(tuple(fields)))


def enum(name, *variants, loc=None):
    return TypeDecl(name, EnumShape(tuple(variants), variants_loc=loc))


def unit_variants(count):
    return [Variant(f"V{i}") for i in range(count)]


# =============================================================================
# STRUCT SIZE COMPOSER
# =============================================================================

class TestStructSizes:
    def test_unit_struct_is_zero(self):
        assert exact_size(struct("Unit")) == 0

    def test_single_field(self):
        assert exact_size(struct("Field", field(U32, name="t"))) == 4

    def test_fields_are_summed(self):
        decl = struct("Fields2", field(U32, name="t"), field(U64, name="v"))
        assert exact_size(decl) == 12

    def test_variable_field_makes_struct_unknown(self):
        decl = struct("FieldsNoSize", field(U32, name="t"), field(VEC_U8, name="v"))
        assert exact_size(decl) is None

    def test_unknown_field_first_still_unknown(self):
        decl = struct("S", field(GenericType("Option", (U8,))), field(U64))
        assert exact_size(decl) is None

    def test_tuple_and_array_fields(self):
        decl = struct("S", field(TupleType((U8, BuiltinType.U16))), field(ArrayType(U32, 4)))
        assert exact_size(decl) == 3 + 16

    def test_unit_field_is_zero(self):
        assert exact_size(struct("S", field(UNIT), field(U8))) == 1

    def test_builtin_widths(self):
        decl = struct("S", field(BuiltinType.BOOL), field(BuiltinType.CHAR),
                      field(BuiltinType.I128), field(BuiltinType.F64))
        assert exact_size(decl) == 1 + 4 + 16 + 8

    def test_string_is_unknown(self):
        assert exact_size(struct("S", field(BuiltinType.STRING))) is None

    def test_referenced_struct(self):
        point = struct("Point", field(BuiltinType.I32, name="x"), field(BuiltinType.I32, name="y"))
        rect = struct("Rect", field(NamedType("Point")), field(NamedType("Point")))
        assert exact_size(rect, [point]) == 16

    def test_transparent_wrappers_and_phantom(self):
        decl = struct("S", field(GenericType("Box", (U32,))), field(GenericType("Arc", (U8,))),
                      field(GenericType("PhantomData", (VEC_U8,))))
        assert exact_size(decl) == 5


# =============================================================================
# PER-FIELD MODIFIERS
# =============================================================================

class TestFieldModifiers:
    def test_skip_contributes_zero(self):
        decl = struct("S", field(VEC_U8, FieldModifier.skip()), field(U32))
        assert exact_size(decl) == 4

    def test_encoded_as_uses_alternate_type(self):
        decl = struct("S", field(U32, FieldModifier.encoded_as(U64)))
        assert exact_size(decl) == 8

    def test_encoded_as_variable_alternate(self):
        decl = struct("S", field(ArrayType(U8, 4), FieldModifier.encoded_as(VEC_U8)))
        assert exact_size(decl) is None

    def test_compact_integer_is_unknown(self):
        assert exact_size(struct("S", field(U32, FieldModifier.compact()))) is None

    def test_compact_unit_is_zero(self):
        assert exact_size(struct("S", field(UNIT, FieldModifier.compact()), field(U8))) == 1

    def test_compact_generic_is_unknown(self):
        assert exact_size(struct("S", field(GenericType("Compact", (U64,))))) is None

    def test_compact_signed_is_rejected(self):
        with pytest.raises(StructuralError) as exc_info:
            exact_size(struct("S", field(BuiltinType.I64, FieldModifier.compact())))
        assert exc_info.value.kind == "NotCompactable"

    @pytest.mark.parametrize("modifiers", [
        (FieldModifier.skip(), FieldModifier.compact()),
        (FieldModifier.compact(), FieldModifier.encoded_as(U64)),
        (FieldModifier.skip(), FieldModifier.encoded_as(U64)),
    ])
    def test_conflicting_modifiers(self, modifiers):
        loc = Span(3, 5, 3, 20)
        with pytest.raises(StructuralError) as exc_info:
            exact_size(struct("S", field(U32, *modifiers, name="v", loc=loc)))
        assert exc_info.value.kind == "ConflictingFieldModifiers"
        assert exc_info.value.span == loc

    def test_conflict_after_unknown_field_is_still_reported(self):
        late = field(U32, FieldModifier.skip(), FieldModifier.compact(), name="b")
        decl = struct("S", field(VEC_U8, name="a"), late)
        with pytest.raises(StructuralError) as exc_info:
            exact_size(decl)
        assert exc_info.value.kinds == ["ConflictingFieldModifiers"]

    def test_every_conflict_is_reported(self):
        decl = struct(
            "S",
            field(U32, FieldModifier.skip(), FieldModifier.compact(), name="a"),
            field(U8),
            field(U64, FieldModifier.compact(), FieldModifier.encoded_as(U32), name="c"),
        )
        with pytest.raises(StructuralError) as exc_info:
            exact_size(decl)
        assert exc_info.value.kinds == ["ConflictingFieldModifiers", "ConflictingFieldModifiers"]

    def test_resolve_single_field(self):
        analysis = ExactSizeAnalysis(struct("S"), TypeSizer(lambda name: None), lambda name: False)
        assert analysis.resolve_field(field(U32, FieldModifier.encoded_as(U64))) == 8
        assert analysis.resolve_field(field(VEC_U8, FieldModifier.skip())) == 0
        assert analysis.resolve_field(field(U32, FieldModifier.skip(), FieldModifier.compact())) is None
        assert [d.code for d in analysis.diagnostics] == ["SZ0101"]

    def test_encoded_as_requires_alternate(self):
        with pytest.raises(ValueError):
            FieldModifier(FieldModifier.skip().kind, alternate=U64)


# =============================================================================
# ENUM SHAPE CLASSIFIER
# =============================================================================

class TestEnumSizes:
    def test_enum_without_variants_is_unknown(self):
        assert exact_size(enum("E")) is None

    def test_enum_without_variants_warns(self):
        analyzer = SchemaAnalyzer(Schema((enum("E"),)))
        [result] = analyzer.run()
        assert not result.rejected
        assert [d.code for d in result.diagnostics] == ["SZ1001"]
        assert analyzer.reporter.exit_code() == 1

    def test_unit_variants(self):
        assert exact_size(enum("E", Variant("A"), Variant("B"), Variant("C"))) == 1

    def test_skipped_fields_are_empty_like(self):
        decl = enum(
            "E",
            Variant("A", (field(U32, FieldModifier.skip()),)),
            Variant("B", (field(VEC_U8, FieldModifier.skip(), name="v"),)),
            Variant("C"),
        )
        assert exact_size(decl) == 1

    @pytest.mark.parametrize("payload", [
        field(U32),
        field(U8, name="v"),
        field(UNIT),
        field(U32, FieldModifier.compact()),
        field(U32, FieldModifier.encoded_as(U64)),
    ])
    def test_variant_with_field_is_unknown(self, payload):
        assert exact_size(enum("E", Variant("A", (payload,)), Variant("B"))) is None

    def test_256_variants_fit(self):
        assert exact_size(enum("E", *unit_variants(256))) == 1

    def test_257_variants_are_rejected(self):
        loc = Span(1, 8, 260, 1)
        with pytest.raises(StructuralError) as exc_info:
            exact_size(enum("E", *unit_variants(257), loc=loc))
        assert exc_info.value.kind == "TooManyVariants"
        assert exc_info.value.span == loc

    def test_too_many_variants_with_payloads(self):
        variants = unit_variants(256) + [Variant("Last", (field(VEC_U8),))]
        with pytest.raises(StructuralError) as exc_info:
            exact_size(enum("E", *variants))
        assert exc_info.value.kind == "TooManyVariants"

    def test_skipped_variants_are_not_counted(self):
        variants = unit_variants(256) + [Variant("Extra", (field(VEC_U8),), skipped=True)]
        assert exact_size(enum("E", *variants)) == 1

    def test_only_skipped_variants_is_unknown(self):
        assert exact_size(enum("E", Variant("A", skipped=True))) is None

    def test_conflict_in_variant_field_is_rejected(self):
        bad = field(U32, FieldModifier.skip(), FieldModifier.compact())
        with pytest.raises(StructuralError) as exc_info:
            exact_size(enum("E", Variant("A", (bad,))))
        assert exc_info.value.kind == "ConflictingFieldModifiers"

    def test_duplicate_variant(self):
        with pytest.raises(StructuralError) as exc_info:
            exact_size(enum("E", Variant("A"), Variant("A")))
        assert exc_info.value.kind == "DuplicateVariant"


# =============================================================================
# UNSUPPORTED SHAPES AND REFERENCES
# =============================================================================

class TestRejections:
    def test_union_is_rejected(self):
        loc = Span(1, 7, 1, 10)
        decl = TypeDecl("Raw", UnionShape((field(U32, name="a"),)), loc=loc)
        with pytest.raises(StructuralError) as exc_info:
            exact_size(decl)
        assert exc_info.value.kind == "UnsupportedShape"
        assert exc_info.value.span == loc

    def test_empty_union_is_rejected(self):
        with pytest.raises(StructuralError):
            exact_size(TypeDecl("Raw", UnionShape()))

    def test_unknown_type(self):
        with pytest.raises(StructuralError) as exc_info:
            exact_size(struct("S", field(NamedType("Missing"))))
        assert exc_info.value.kind == "UnknownType"

    def test_generic_arity(self):
        with pytest.raises(StructuralError) as exc_info:
            exact_size(struct("S", field(GenericType("Result", (U8,)))))
        assert exc_info.value.kind == "GenericArity"

    def test_duplicate_field(self):
        decl = struct("S", field(U8, name="a"), field(U8, name="a"))
        with pytest.raises(StructuralError) as exc_info:
            exact_size(decl)
        assert exc_info.value.kind == "DuplicateField"

    def test_reference_to_rejected_type_is_unknown(self):
        raw = TypeDecl("Raw", UnionShape((field(U32),)))
        holder = struct("Holder", field(NamedType("Raw")))
        assert exact_size(holder, [raw]) is None

    def test_self_reference_is_unknown(self):
        node = struct("Node", field(U32), field(GenericType("Box", (NamedType("Node"),))))
        assert exact_size(node) is None

    def test_size_beyond_64_bits_is_rejected(self):
        loc = Span(1, 8, 1, 11)
        decl = TypeDecl("Big", StructShape((field(ArrayType(BuiltinType.U128, 2 * 10**18)),)), loc=loc)
        with pytest.raises(StructuralError) as exc_info:
            exact_size(decl)
        assert exc_info.value.kind == "SizeOverflow"
        assert exc_info.value.span == loc

    def test_sum_beyond_64_bits_is_rejected(self):
        half = ArrayType(U8, 2**63)
        with pytest.raises(StructuralError) as exc_info:
            exact_size(struct("Halves", field(half, name="a"), field(half, name="b")))
        assert exc_info.value.kind == "SizeOverflow"

    def test_largest_size_is_accepted(self):
        assert exact_size(struct("Largest", field(ArrayType(U8, 2**64 - 1)))) == 2**64 - 1

    def test_reference_to_oversized_type_is_unknown(self):
        big = struct("Big", field(ArrayType(U64, 2**62)))
        holder = struct("Holder", field(NamedType("Big")), field(U8))
        assert exact_size(holder, [big]) is None


# =============================================================================
# SCHEMA DRIVER
# =============================================================================

class TestSchemaAnalyzer:
    def test_results_in_declaration_order(self):
        schema = Schema((
            struct("B", field(NamedType("A"))),
            struct("A", field(U64)),
        ))
        results = SchemaAnalyzer(schema).run()
        assert [(r.decl.name, r.size) for r in results] == [("B", 8), ("A", 8)]

    def test_duplicate_declaration_is_rejected(self):
        schema = Schema((struct("A", field(U8)), struct("A", field(U64))))
        analyzer = SchemaAnalyzer(schema)
        first, second = analyzer.run()
        assert first.size == 1 and not first.rejected
        assert second.rejected
        assert [d.code for d in analyzer.reporter.errors] == ["SZ0001"]

    def test_one_rejection_does_not_stop_others(self):
        schema = Schema((
            TypeDecl("Raw", UnionShape()),
            struct("Word", field(U32)),
        ))
        raw, word = SchemaAnalyzer(schema).run()
        assert raw.rejected
        assert word.is_fixed and word.size == 4

    def test_analysis_is_repeatable(self):
        schema = Schema((
            struct("Point", field(U32), field(U32)),
            enum("Kind", Variant("A"), Variant("B")),
            struct("Bag", field(VEC_U8)),
        ))
        first = [(r.decl.name, r.size, r.rejected) for r in SchemaAnalyzer(schema).run()]
        second = [(r.decl.name, r.size, r.rejected) for r in SchemaAnalyzer(schema).run()]
        assert first == second == [("Point", 8, False), ("Kind", 1, False), ("Bag", None, False)]
