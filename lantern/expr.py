"""High-level expressions, referencing each other by ExprId."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from lantern.types import BinOp, CaptureKind, LuaValue, UnOp
from lantern.var import RegRef, VarId


@dataclass(frozen=True, order=True)
class ExprId:
    """Opaque expression identifier, an index into an ExprArena."""

    index: int


@dataclass
class Var:
    """Resolved variable reference."""

    var: VarId


@dataclass
class Reg:
    """Unresolved register reference."""

    reg: RegRef


@dataclass
class Literal:
    """Literal value."""

    value: LuaValue


@dataclass
class Global:
    """Global variable access."""

    name: str


@dataclass
class Upvalue:
    """Upvalue access."""

    index: int


@dataclass
class VarArg:
    """Variadic arguments (`...`)."""


@dataclass
class FieldAccess:
    """`table.field`."""

    table: ExprId
    field: str


@dataclass
class IndexAccess:
    """`table[key]`."""

    table: ExprId
    key: ExprId


@dataclass
class Binary:
    """`left op right`."""

    op: BinOp
    left: ExprId
    right: ExprId


@dataclass
class Unary:
    """`op operand`."""

    op: UnOp
    operand: ExprId


@dataclass
class Call:
    """Function call; result_count 0 means multiple returns."""

    func: ExprId
    args: list[ExprId] = field(default_factory=list)
    result_count: int = 0
    builtin_id: int = 0


@dataclass
class MethodCall:
    """`object:method(args...)`."""

    object: ExprId
    method: str
    args: list[ExprId] = field(default_factory=list)
    result_count: int = 0


@dataclass(frozen=True)
class CaptureRegister:
    """Capture from a local register."""

    reg: RegRef


@dataclass(frozen=True)
class CaptureVar:
    """Capture from a resolved variable."""

    var: VarId


@dataclass(frozen=True)
class CaptureUpvalue:
    """Capture from the parent's upvalue slot."""

    index: int


CaptureSource = Union[CaptureRegister, CaptureVar, CaptureUpvalue]


@dataclass
class Capture:
    """A captured upvalue in a closure."""

    kind: CaptureKind
    source: CaptureSource


@dataclass
class Closure:
    """Closure creation."""

    proto_id: int
    captures: list[Capture] = field(default_factory=list)


@dataclass
class Table:
    """Table constructor with array items and keyed hash items."""

    array: list[ExprId] = field(default_factory=list)
    hash: list[tuple[ExprId, ExprId]] = field(default_factory=list)
    has_named_keys: bool = False


@dataclass
class Concat:
    """`a .. b .. c`."""

    operands: list[ExprId] = field(default_factory=list)


@dataclass
class IfExpr:
    """`if condition then then_expr else else_expr`."""

    condition: ExprId
    then_expr: ExprId
    else_expr: ExprId


@dataclass
class Select:
    """The index-th value of a multi-return source."""

    source: ExprId
    index: int


HirExpr = Union[
    Var,
    Reg,
    Literal,
    Global,
    Upvalue,
    VarArg,
    FieldAccess,
    IndexAccess,
    Binary,
    Unary,
    Call,
    MethodCall,
    Closure,
    Table,
    Concat,
    IfExpr,
    Select,
]


def expr_children(expr: HirExpr) -> tuple[ExprId, ...]:
    """The sub-expression ids of *expr*, in evaluation order."""
    match expr:
        case FieldAccess(table=table):
            return (table,)
        case IndexAccess(table=table, key=key):
            return (table, key)
        case Binary(left=left, right=right):
            return (left, right)
        case Unary(operand=operand):
            return (operand,)
        case Call(func=func, args=args):
            return (func, *args)
        case MethodCall(object=obj, args=args):
            return (obj, *args)
        case Table(array=array, hash=hash_items):
            return (*array, *(eid for pair in hash_items for eid in pair))
        case Concat(operands=operands):
            return tuple(operands)
        case IfExpr(condition=c, then_expr=t, else_expr=e):
            return (c, t, e)
        case Select(source=source):
            return (source,)
        case _:
            return ()