"""Fold field writes that follow a table constructor into the constructor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from lantern.arena import ExprArena
from lantern.expr import (
    CaptureVar,
    Closure,
    ExprId,
    Literal,
    Table,
    Var,
    expr_children,
)
from lantern.func import HirFunc
from lantern.stmt import (
    Assign,
    FieldTarget,
    HirStmt,
    IndexTarget,
    LocalDecl,
    LocalTarget,
    nested_bodies,
)
from lantern.var import VarId


@dataclass
class _NumericIndex:
    key: int
    value: ExprId


@dataclass
class _ExprIndex:
    key: ExprId
    value: ExprId


@dataclass
class _FieldWrite:
    field: str
    value: ExprId


_TableWrite = Union[_NumericIndex, _ExprIndex, _FieldWrite]


def fold_table_constructors(func: HirFunc) -> None:
    """Fold `t[k] = v` / `t.f = v` after `t = {...}` into the constructor."""
    for node in func.cfg.node_indices():
        _fold_in_stmts(func.cfg[node].stmts, func.exprs)


def _fold_in_stmts(stmts: list[HirStmt], exprs: ExprArena) -> None:
    for stmt in stmts:
        for body in nested_bodies(stmt):
            _fold_in_stmts(body, exprs)

    i = 0
    while i < len(stmts):
        table_def = _get_table_def(stmts[i], exprs)
        if table_def is not None:
            var_id, table_expr_id = table_def
            writes: list[_TableWrite] = []
            j = i + 1
            while j < len(stmts):
                write = _get_table_write(stmts[j], var_id, exprs)
                # `t[k] = t[1]` cannot move into the constructor: t does not exist yet.
                if write is None or _write_references_var(write, var_id, exprs):
                    break
                writes.append(write)
                j += 1

            if writes:
                remaining = max(_count_var_uses(var_id, exprs) - len(writes), 0)
                if remaining > 1:
                    i += 1
                    continue

                stale_refs = [
                    s.target.table
                    for s in stmts[i + 1 : j]
                    if isinstance(s, Assign)
                    and isinstance(s.target, (IndexTarget, FieldTarget))
                ]
                _apply_table_fold(exprs, table_expr_id, writes)
                # Leftover Var slots would otherwise look like table-target uses.
                for ref in stale_refs:
                    exprs.replace(ref, Literal(None))
                del stmts[i + 1 : j]
        i += 1


def _get_table_def(stmt: HirStmt, exprs: ExprArena) -> tuple[VarId, ExprId] | None:
    match stmt:
        case Assign(target=LocalTarget(var=var_id), value=value):
            pass
        case LocalDecl(var=var_id, init=value) if value is not None:
            pass
        case _:
            return None
    if isinstance(exprs.get(value), Table):
        return var_id, value
    return None


def _is_var(exprs: ExprArena, expr_id: ExprId, var_id: VarId) -> bool:
    expr = exprs.get(expr_id)
    return isinstance(expr, Var) and expr.var == var_id


def _as_array_index(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if number.is_integer() and number >= 1.0:
        return int(number)
    return None


def _get_table_write(
    stmt: HirStmt, var_id: VarId, exprs: ExprArena
) -> _TableWrite | None:
    if not isinstance(stmt, Assign):
        return None
    target = stmt.target
    if isinstance(target, IndexTarget) and _is_var(exprs, target.table, var_id):
        key_expr = exprs.get(target.key)
        if isinstance(key_expr, Literal):
            index = _as_array_index(key_expr.value)
            if index is not None:
                return _NumericIndex(index, stmt.value)
        return _ExprIndex(target.key, stmt.value)
    if isinstance(target, FieldTarget) and _is_var(exprs, target.table, var_id):
        return _FieldWrite(target.field, stmt.value)
    return None


def _apply_table_fold(
    exprs: ExprArena, table_expr_id: ExprId, writes: list[_TableWrite]
) -> None:
    table = exprs.get(table_expr_id)
    if not isinstance(table, Table):
        return
    array = list(table.array)
    hash_items = list(table.hash)
    next_index = len(array) + 1
    for write in writes:
        match write:
            case _NumericIndex(key=key, value=value):
                if key == next_index:
                    array.append(value)
                    next_index += 1
                else:
                    hash_items.append((exprs.alloc(Literal(float(key))), value))
            case _ExprIndex(key=key, value=value):
                hash_items.append((key, value))
            case _FieldWrite(field=name, value=value):
                hash_items.append((exprs.alloc(Literal(name.encode())), value))
    exprs.replace(table_expr_id, Table(array, hash_items, table.has_named_keys))


def _write_references_var(write: _TableWrite, var_id: VarId, exprs: ExprArena) -> bool:
    if isinstance(write, _ExprIndex) and _expr_references_var(exprs, write.key, var_id):
        return True
    return _expr_references_var(exprs, write.value, var_id)


def _count_var_uses(var_id: VarId, exprs: ExprArena) -> int:
    return sum(1 for _, e in exprs if isinstance(e, Var) and e.var == var_id)


def _expr_references_var(exprs: ExprArena, expr_id: ExprId, var_id: VarId) -> bool:
    expr = exprs.get(expr_id)
    if isinstance(expr, Var):
        return expr.var == var_id
    if isinstance(expr, Closure):
        return any(
            isinstance(c.source, CaptureVar) and c.source.var == var_id
            for c in expr.captures
        )
    return any(_expr_references_var(exprs, c, var_id) for c in expr_children(expr))