"""Split reused unnamed temporaries into one variable per definition."""

from __future__ import annotations

from lantern.arena import ExprArena
from lantern.expr import ExprId, Var, expr_children
from lantern.func import HirFunc
from lantern.stmt import (
    Assign,
    CompoundAssign,
    ExprStmt,
    FieldTarget,
    FunctionDef,
    GenericFor,
    HirStmt,
    If,
    IndexTarget,
    LocalDecl,
    LocalFunctionDef,
    LocalTarget,
    LValue,
    MultiAssign,
    MultiLocalDecl,
    NumericFor,
    RegAssign,
    Repeat,
    Return,
    While,
    nested_bodies,
)
from lantern.var import VarId, VarInfo


def split_multi_def_temps(func: HirFunc) -> None:
    """Give every 2nd, 3rd, ... definition of a reused temporary its own variable.

    Each statement list (nested bodies included) is handled on its own: uses
    that follow a later definition are rewritten to the fresh variable.
    """
    for node in func.cfg.node_indices():
        block = func.cfg[node]
        block.stmts = _split_stmts(block.stmts, func)


def _def_var(stmt: HirStmt) -> VarId | None:
    match stmt:
        case Assign(target=LocalTarget(var=var_id)):
            return var_id
        case LocalDecl(var=var_id, init=init) if init is not None:
            return var_id
    return None


def _split_stmts(stmts: list[HirStmt], func: HirFunc) -> list[HirStmt]:
    def_counts: dict[VarId, int] = {}
    for stmt in stmts:
        var_id = _def_var(stmt)
        if var_id is not None and func.vars.get(var_id).is_temporary():
            def_counts[var_id] = def_counts.get(var_id, 0) + 1
    multi_defs = {var_id for var_id, count in def_counts.items() if count >= 2}

    if not multi_defs:
        return [_recurse_into_bodies(stmt, func) for stmt in stmts]

    current: dict[VarId, VarId] = {}
    seen: dict[VarId, int] = {}
    result: list[HirStmt] = []

    for stmt in stmts:
        var_id = _def_var(stmt)
        if var_id is not None and var_id in multi_defs:
            seen[var_id] = seen.get(var_id, 0) + 1
            if seen[var_id] >= 2:
                new_var = func.vars.alloc(VarInfo())
                current[var_id] = new_var
                result.append(_rewrite_def(stmt, var_id, new_var))
                continue
            current.pop(var_id, None)

        if current:
            _rewrite_uses(stmt, current, func.exprs)
        result.append(_recurse_into_bodies(stmt, func))

    return result


def _rewrite_def(stmt: HirStmt, old_var: VarId, new_var: VarId) -> HirStmt:
    match stmt:
        case Assign(target=LocalTarget(var=var_id), value=value) if var_id == old_var:
            return Assign(LocalTarget(new_var), value)
        case LocalDecl(var=var_id, init=init) if var_id == old_var and init is not None:
            return Assign(LocalTarget(new_var), init)
    return stmt


def _rewrite_uses(
    stmt: HirStmt, replacements: dict[VarId, VarId], exprs: ExprArena
) -> None:
    visited: set[ExprId] = set()
    for expr_id in _use_expr_ids(stmt):
        _rewrite_var_refs(expr_id, replacements, exprs, visited)


def _rewrite_var_refs(
    expr_id: ExprId,
    replacements: dict[VarId, VarId],
    exprs: ExprArena,
    visited: set[ExprId],
) -> None:
    if expr_id in visited:
        return
    visited.add(expr_id)
    expr = exprs.get(expr_id)
    if isinstance(expr, Var) and expr.var in replacements:
        exprs.replace(expr_id, Var(replacements[expr.var]))
        return
    for child in expr_children(expr):
        _rewrite_var_refs(child, replacements, exprs, visited)


def _lvalue_reads(target: LValue) -> list[ExprId]:
    if isinstance(target, FieldTarget):
        return [target.table]
    if isinstance(target, IndexTarget):
        return [target.table, target.key]
    return []


def _use_expr_ids(stmt: HirStmt) -> list[ExprId]:
    """Expression ids read by the statement itself, not by its nested bodies."""
    match stmt:
        case Assign(target=target, value=value) | CompoundAssign(
            target=target, value=value
        ):
            return [*_lvalue_reads(target), value]
        case LocalDecl(init=init):
            return [] if init is None else [init]
        case MultiLocalDecl(values=values):
            return list(values)
        case MultiAssign(targets=targets, values=values):
            return [eid for t in targets for eid in _lvalue_reads(t)] + list(values)
        case ExprStmt(expr=expr):
            return [expr]
        case Return(values=values):
            return list(values)
        case FunctionDef(name=name, func_expr=func_expr):
            return [*_lvalue_reads(name), func_expr]
        case LocalFunctionDef(func_expr=func_expr):
            return [func_expr]
        case RegAssign(value=value):
            return [value]
        case If(condition=condition) | While(condition=condition) | Repeat(
            condition=condition
        ):
            return [condition]
        case NumericFor(start=start, limit=limit, step=step):
            return [start, limit] + ([] if step is None else [step])
        case GenericFor(iterators=iterators):
            return list(iterators)
    return []


def _recurse_into_bodies(stmt: HirStmt, func: HirFunc) -> HirStmt:
    for body in nested_bodies(stmt):
        body[:] = _split_stmts(list(body), func)
    return stmt