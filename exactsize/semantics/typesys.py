from __future__ import annotations
from enum import Enum
from typing import Optional, Union
from dataclasses import dataclass

class BuiltinType(Enum):
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    I128 = "i128"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    CHAR = "char"
    STR = "str"
    STRING = "String"

    def __str__(self) -> str:
        return self.value

    @property
    def is_unsigned(self) -> bool:
        return self in (BuiltinType.U8, BuiltinType.U16, BuiltinType.U32,
                        BuiltinType.U64, BuiltinType.U128)

@dataclass(frozen=True)
class UnitType:
    def __str__(self) -> str:
        return "()"

@dataclass(frozen=True)
class TupleType:
    elements: tuple["Type", ...]

    def __str__(self) -> str:
        if len(self.elements) == 1:
            return f"({self.elements[0]},)"
        return "(" + ", ".join(str(t) for t in self.elements) + ")"

@dataclass(frozen=True)
class ArrayType:
    base_type: "Type"  # The element type
    size: int          # Array length (schema constant)

    def __str__(self) -> str:
        return f"[{self.base_type}; {self.size}]"

@dataclass(frozen=True)
class GenericType:
    """A builtin container applied to type arguments, e.g. Vec<u8> or Compact<u32>."""
    name: str
    args: tuple["Type", ...]

    def __str__(self) -> str:
        return f"{self.name}<" + ", ".join(str(t) for t in self.args) + ">"

@dataclass(frozen=True)
class NamedType:
    """Reference to a struct/enum/union declared in the schema (resolved lazily)."""
    name: str

    def __str__(self) -> str:
        return self.name

Type = Union[BuiltinType, UnitType, TupleType, ArrayType, GenericType, NamedType]

UNIT = UnitType()

BUILTIN_MAP = {t.value: t for t in BuiltinType}

# Containers whose encoding is length- or tag-prefixed: never a fixed size.
VARIABLE_CONTAINERS = frozenset({
    "Vec", "VecDeque", "LinkedList", "BinaryHeap",
    "BTreeMap", "BTreeSet", "Option", "Result",
})

# Smart pointers encode exactly like their pointee.
TRANSPARENT_WRAPPERS = frozenset({"Box", "Rc", "Arc"})

GENERIC_ARITY = {
    "Vec": 1, "VecDeque": 1, "LinkedList": 1, "BinaryHeap": 1, "BTreeSet": 1,
    "BTreeMap": 2, "Option": 1, "Result": 2,
    "Box": 1, "Rc": 1, "Arc": 1, "Compact": 1, "PhantomData": 1,
}

def is_known_generic(name: str) -> bool:
    return name in GENERIC_ARITY

def named_types_in(ty: Type) -> list[NamedType]:
    """All user-type references reachable inside a type expression, in order."""
    if isinstance(ty, NamedType):
        return [ty]
    if isinstance(ty, TupleType):
        found: list[NamedType] = []
        for t in ty.elements:
            found.extend(named_types_in(t))
        return found
    if isinstance(ty, ArrayType):
        return named_types_in(ty.base_type)
    if isinstance(ty, GenericType):
        found = []
        for t in ty.args:
            found.extend(named_types_in(t))
        return found
    return []

def type_from_name(name: str, args: Optional[tuple[Type, ...]] = None) -> Type:
    """Map a path type (name + optional generic args) onto the type system."""
    if not args:
        builtin = BUILTIN_MAP.get(name)
        if builtin is not None:
            return builtin
        if name in GENERIC_ARITY:
            # Bare container name without arguments, e.g. `Vec`: keep it generic
            return GenericType(name, ())
        return NamedType(name)
    return GenericType(name, tuple(args))
