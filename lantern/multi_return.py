"""Collapse a call and the Select assignments that follow it into one statement."""

from __future__ import annotations

from dataclasses import dataclass

from lantern.arena import ExprArena
from lantern.expr import Call, ExprId, MethodCall, Select, VarArg
from lantern.func import HirFunc
from lantern.stmt import (
    Assign,
    HirStmt,
    LocalDecl,
    LocalTarget,
    LValue,
    MultiAssign,
    MultiLocalDecl,
)


@dataclass
class _Group:
    start: int
    count: int
    source: ExprId
    targets: list[LValue]
    all_local_decls: bool


def collapse_multi_returns(func: HirFunc) -> None:
    """Turn `a = f(); b = select(f, 1); ...` into `a, b, ... = f()`.

    Call and method-call result counts are set to the number of targets.
    When every statement was a local declaration a MultiLocalDecl is made,
    otherwise a MultiAssign.
    """
    for node in func.cfg.node_indices():
        block = func.cfg[node]
        if not block.stmts:
            continue
        groups = _find_groups(block.stmts, func.exprs)
        if not groups:
            continue

        new_stmts = list(block.stmts)
        for group in sorted(groups, key=lambda g: g.start, reverse=True):
            _set_result_count(func.exprs, group.source, len(group.targets))
            values = [group.source]
            merged: HirStmt
            if group.all_local_decls:
                merged = MultiLocalDecl(
                    [t.var for t in group.targets if isinstance(t, LocalTarget)],
                    values,
                )
            else:
                merged = MultiAssign(list(group.targets), values)
            new_stmts[group.start : group.start + group.count] = [merged]
        block.stmts = new_stmts


def _definition(stmt: HirStmt) -> tuple[LValue, ExprId] | None:
    match stmt:
        case Assign(target=target, value=value):
            return target, value
        case LocalDecl(var=var_id, init=init) if init is not None:
            return LocalTarget(var_id), init
    return None


def _is_multi_return_source(exprs: ExprArena, expr_id: ExprId) -> bool:
    return isinstance(exprs.get(expr_id), (Call, MethodCall, VarArg))


def _select_of(stmt: HirStmt, exprs: ExprArena) -> tuple[LValue, ExprId] | None:
    definition = _definition(stmt)
    if definition is None:
        return None
    target, value = definition
    expr = exprs.get(value)
    if isinstance(expr, Select):
        return target, expr.source
    return None


def _find_groups(stmts: list[HirStmt], exprs: ExprArena) -> list[_Group]:
    groups: list[_Group] = []
    i = 0
    while i < len(stmts):
        definition = _definition(stmts[i])
        if definition is not None and _is_multi_return_source(exprs, definition[1]):
            target, source = definition
            targets = [target]
            all_local = isinstance(stmts[i], LocalDecl)
            j = i + 1
            while j < len(stmts):
                selected = _select_of(stmts[j], exprs)
                if selected is None or selected[1] != source:
                    break
                if not isinstance(stmts[j], LocalDecl):
                    all_local = False
                targets.append(selected[0])
                j += 1
            if len(targets) > 1:
                groups.append(_Group(i, len(targets), source, targets, all_local))
                i = j
                continue
        i += 1
    return groups


def _set_result_count(exprs: ExprArena, expr_id: ExprId, count: int) -> None:
    expr = exprs.get(expr_id)
    if isinstance(expr, (Call, MethodCall)):
        expr.result_count = count