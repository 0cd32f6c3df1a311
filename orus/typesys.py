"""Type descriptors for the compiler: primitives, arrays, functions, structs, enums and generics."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

MAX_USER_TYPES = 256
_I32_MAX = 2**31 - 1


class TypeKind(Enum):
    """Every kind of type the compiler knows about."""

    I32 = "i32"
    I64 = "i64"
    U32 = "u32"
    U64 = "u64"
    F64 = "f64"
    BOOL = "bool"
    STRING = "string"
    VOID = "void"
    NIL = "nil"
    ARRAY = "array"
    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"
    GENERIC = "generic"


PRIMITIVE_KINDS = (
    TypeKind.I32,
    TypeKind.I64,
    TypeKind.U32,
    TypeKind.U64,
    TypeKind.F64,
    TypeKind.BOOL,
    TypeKind.STRING,
    TypeKind.VOID,
    TypeKind.NIL,
)

# Kinds for which equal kind alone means equal type.
_KIND_ONLY_EQUAL = frozenset(
    {
        TypeKind.I32,
        TypeKind.I64,
        TypeKind.U32,
        TypeKind.U64,
        TypeKind.F64,
        TypeKind.BOOL,
        TypeKind.STRING,
        TypeKind.NIL,
    }
)


@dataclass(eq=False)
class Type:
    """A type descriptor; primitive types are plain instances of this class."""

    kind: TypeKind


@dataclass(eq=False)
class ArrayType(Type):
    """An array whose elements all have one type."""

    kind: TypeKind = field(default=TypeKind.ARRAY, init=False, repr=False)
    element: Optional[Type] = None


@dataclass(eq=False)
class FunctionType(Type):
    """A function signature."""

    kind: TypeKind = field(default=TypeKind.FUNCTION, init=False, repr=False)
    return_type: Optional[Type] = None
    params: tuple = ()


@dataclass(frozen=True)
class FieldInfo:
    """A named field of a struct."""

    name: str
    type: Optional[Type]


@dataclass(frozen=True)
class VariantInfo:
    """A named variant of an enum, with the types of its payload fields."""

    name: str
    fields: tuple = ()


@dataclass(eq=False)
class StructType(Type):
    """A named struct with fields and optional generic parameters."""

    kind: TypeKind = field(default=TypeKind.STRUCT, init=False, repr=False)
    name: str = ""
    fields: tuple = ()
    generics: tuple = ()


@dataclass(eq=False)
class EnumType(Type):
    """A named enum with variants and optional generic parameters."""

    kind: TypeKind = field(default=TypeKind.ENUM, init=False, repr=False)
    name: str = ""
    variants: tuple = ()
    generics: tuple = ()


@dataclass(eq=False)
class GenericType(Type):
    """A generic type parameter, referred to by name."""

    kind: TypeKind = field(default=TypeKind.GENERIC, init=False, repr=False)
    name: str = ""


class TypeRegistryFullError(Exception):
    """Raised when no more struct or enum types can be registered."""


class TypeRegistry:
    """Owns the primitive types and every declared struct and enum type."""

    def __init__(self) -> None:
        self._primitives: dict[TypeKind, Type] = {}
        self._structs: list[StructType] = []
        self._enums: list[EnumType] = []
        self.reset()

    def reset(self) -> None:
        """Forget all declared types and create fresh primitive types."""
        self._primitives = {kind: Type(kind) for kind in PRIMITIVE_KINDS}
        self._structs = []
        self._enums = []

    def primitive(self, kind: TypeKind) -> Type:
        """Return the shared descriptor of a primitive kind."""
        try:
            return self._primitives[kind]
        except KeyError:
            raise ValueError(f"{kind!r} is not a primitive type kind") from None

    def create_struct(
        self, name: str, fields: Sequence[FieldInfo] = (), generics: Sequence[str] = ()
    ) -> StructType:
        """Declare and register a new struct type."""
        if len(self._structs) >= MAX_USER_TYPES:
            raise TypeRegistryFullError(f"too many struct types (limit {MAX_USER_TYPES})")
        struct = StructType(name=name, fields=tuple(fields), generics=tuple(generics))
        self._structs.append(struct)
        return struct

    def create_enum(
        self, name: str, variants: Sequence[VariantInfo] = (), generics: Sequence[str] = ()
    ) -> EnumType:
        """Declare and register a new enum type."""
        if len(self._enums) >= MAX_USER_TYPES:
            raise TypeRegistryFullError(f"too many enum types (limit {MAX_USER_TYPES})")
        enum = EnumType(name=name, variants=tuple(variants), generics=tuple(generics))
        self._enums.append(enum)
        return enum

    def find_struct(self, name: str) -> Optional[StructType]:
        """Return the first registered struct with this name, or None."""
        return next((s for s in self._structs if s.name == name), None)

    def find_enum(self, name: str) -> Optional[EnumType]:
        """Return the first registered enum with this name, or None."""
        return next((e for e in self._enums if e.name == name), None)

    def instantiate_struct(self, base: Optional[Type], args: Sequence[Optional[Type]]):
        """Create a concrete struct by substituting ``args`` for the generic parameters."""
        if not isinstance(base, StructType):
            return base
        fields = [
            FieldInfo(f.name, substitute_generics(f.type, base.generics, args))
            for f in base.fields
        ]
        return self.create_struct(base.name, fields, ())


def type_name(kind) -> str:
    """Return the source-level name of a type kind."""
    return kind.value if isinstance(kind, TypeKind) else "unknown"


def types_equal(a: Optional[Type], b: Optional[Type]) -> bool:
    """Structural type equality."""
    if a is None or b is None:
        return False
    if a is b:
        return True
    if a.kind != b.kind:
        return False
    if a.kind in _KIND_ONLY_EQUAL:
        return True
    if isinstance(a, ArrayType) and isinstance(b, ArrayType):
        return types_equal(a.element, b.element)
    if isinstance(a, FunctionType) and isinstance(b, FunctionType):
        if not types_equal(a.return_type, b.return_type):
            return False
        if len(a.params) != len(b.params):
            return False
        return all(types_equal(x, y) for x, y in zip(a.params, b.params))
    if isinstance(a, (StructType, EnumType, GenericType)) and type(a) is type(b):
        return a.name == b.name
    return False


def can_implicitly_convert(source: Optional[Type], target: Optional[Type], literal=None) -> bool:
    """Whether a value of ``source`` may be used where ``target`` is expected.

    ``literal`` is the constant value when the expression is a literal, else None;
    only literals get the widening numeric conversions.
    """
    if source is None or target is None:
        return False
    if types_equal(source, target):
        return True
    if literal is None:
        return False

    src, dst = source.kind, target.kind
    if src is TypeKind.I32:
        if dst in (TypeKind.I64, TypeKind.F64):
            return True
        if dst in (TypeKind.U32, TypeKind.U64) and literal >= 0:
            return True
    elif src is TypeKind.U32:
        if dst in (TypeKind.U64, TypeKind.I64, TypeKind.F64):
            return True
        if dst is TypeKind.I32 and literal <= _I32_MAX:
            return True
    return False


def substitute_generics(
    type_: Optional[Type], names: Sequence[Optional[str]], subs: Sequence[Optional[Type]]
) -> Optional[Type]:
    """Replace generic parameters named in ``names`` with the matching ``subs``."""
    if type_ is None:
        return None
    if isinstance(type_, GenericType):
        for name, sub in zip(names, subs):
            if name and name == type_.name:
                return sub if sub is not None else type_
        return type_
    if isinstance(type_, ArrayType):
        element = substitute_generics(type_.element, names, subs)
        if element is type_.element:
            return type_
        return ArrayType(element=element)
    if isinstance(type_, FunctionType):
        params = tuple(substitute_generics(p, names, subs) for p in type_.params)
        return FunctionType(
            return_type=substitute_generics(type_.return_type, names, subs), params=params
        )
    return type_