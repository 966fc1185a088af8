"""High-level statements and assignment targets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from lantern.expr import ExprId
from lantern.types import BinOp
from lantern.var import RegRef, VarId


@dataclass
class LocalTarget:
    """Local variable target."""

    var: VarId


@dataclass
class GlobalTarget:
    """Global variable target."""

    name: str


@dataclass
class FieldTarget:
    """`table.field` target."""

    table: ExprId
    field: str


@dataclass
class IndexTarget:
    """`table[key]` target."""

    table: ExprId
    key: ExprId


@dataclass
class UpvalueTarget:
    """Upvalue target."""

    index: int


LValue = Union[LocalTarget, GlobalTarget, FieldTarget, IndexTarget, UpvalueTarget]


@dataclass
class LocalDecl:
    """`local var [= init]`."""

    var: VarId
    init: ExprId | None = None


@dataclass
class MultiLocalDecl:
    """`local a, b, ... = values...`."""

    vars: list[VarId]
    values: list[ExprId]


@dataclass
class Assign:
    """`target = value`."""

    target: LValue
    value: ExprId


@dataclass
class MultiAssign:
    """`t1, t2, ... = values...`."""

    targets: list[LValue]
    values: list[ExprId]


@dataclass
class CompoundAssign:
    """`target op= value`."""

    op: BinOp
    target: LValue
    value: ExprId


@dataclass
class ExprStmt:
    """An expression used as a statement."""

    expr: ExprId


@dataclass
class Return:
    """`return values...`."""

    values: list[ExprId] = field(default_factory=list)


@dataclass
class ElseIfClause:
    """An `elseif` clause."""

    condition: ExprId
    body: list[HirStmt] = field(default_factory=list)


@dataclass
class If:
    """`if ... then ... [elseif ...] [else ...] end`."""

    condition: ExprId
    then_body: list[HirStmt] = field(default_factory=list)
    elseif_clauses: list[ElseIfClause] = field(default_factory=list)
    else_body: list[HirStmt] | None = None
    negated: bool = False


@dataclass
class While:
    """`while condition do body end`."""

    condition: ExprId
    body: list[HirStmt] = field(default_factory=list)


@dataclass
class Repeat:
    """`repeat body until condition`."""

    body: list[HirStmt]
    condition: ExprId


@dataclass
class NumericFor:
    """`for var = start, limit [, step] do body end`."""

    var: VarId
    start: ExprId
    limit: ExprId
    step: ExprId | None = None
    body: list[HirStmt] = field(default_factory=list)


@dataclass
class GenericFor:
    """`for vars... in iterators... do body end`."""

    vars: list[VarId]
    iterators: list[ExprId]
    body: list[HirStmt] = field(default_factory=list)


@dataclass
class Break:
    """`break`."""


@dataclass
class Continue:
    """`continue`."""


@dataclass
class FunctionDef:
    """`function name(...) ... end`."""

    name: LValue
    func_expr: ExprId


@dataclass
class LocalFunctionDef:
    """`local function name(...) ... end`."""

    var: VarId
    func_expr: ExprId


@dataclass
class CloseUpvals:
    """Close upvalues for registers at or above from_register."""

    from_register: int


@dataclass
class RegAssign:
    """Register assignment prior to variable recovery."""

    target: RegRef
    value: ExprId


HirStmt = Union[
    LocalDecl,
    MultiLocalDecl,
    Assign,
    MultiAssign,
    CompoundAssign,
    ExprStmt,
    Return,
    If,
    While,
    Repeat,
    NumericFor,
    GenericFor,
    Break,
    Continue,
    FunctionDef,
    LocalFunctionDef,
    CloseUpvals,
    RegAssign,
]


def nested_bodies(stmt: HirStmt) -> list[list[HirStmt]]:
    """The statement lists nested directly in *stmt* (the live lists)."""
    match stmt:
        case If():
            bodies = [stmt.then_body, *(clause.body for clause in stmt.elseif_clauses)]
            if stmt.else_body is not None:
                bodies.append(stmt.else_body)
            return bodies
        case While() | Repeat() | NumericFor() | GenericFor():
            return [stmt.body]
        case _:
            return []