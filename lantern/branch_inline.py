"""Inline temporaries that are defined and used within one statement list."""

from __future__ import annotations

import copy

from lantern.analysis import expr_has_side_effects
from lantern.arena import ExprArena
from lantern.expr import Closure, ExprId, Table, Var, expr_children
from lantern.func import HirFunc
from lantern.stmt import (
    Assign,
    Break,
    CloseUpvals,
    CompoundAssign,
    Continue,
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
from lantern.var import VarId

_MAX_PASSES = 100


def inline_branch_locals(func: HirFunc) -> None:
    """Inline unnamed temporaries whose definition and single use share a statement list.

    Unlike global temporary elimination, the same variable may be inlined
    independently in different branches: only the one use slot is rewritten.
    """
    for _ in range(_MAX_PASSES):
        if _branch_inline_pass(func) == 0:
            break


def _branch_inline_pass(func: HirFunc) -> int:
    total = 0
    for node in func.cfg.node_indices():
        block = func.cfg[node]
        block.stmts, count = _process_stmt_list(func, block.stmts, False)
        total += count
    return total


def _process_stmt_list(
    func: HirFunc, stmts: list[HirStmt], in_conditional_body: bool
) -> tuple[list[HirStmt], int]:
    total = 0
    for stmt in stmts:
        for body in nested_bodies(stmt):
            new_body, count = _process_stmt_list(func, list(body), True)
            body[:] = new_body
            total += count

    to_remove = [i for i in range(len(stmts)) if _try_inline(func, stmts, i)]

    # A conditional body must not be emptied completely.
    if in_conditional_body and to_remove and len(to_remove) == len(stmts):
        to_remove.pop()

    total += len(to_remove)
    if to_remove:
        removed = set(to_remove)
        stmts = [s for idx, s in enumerate(stmts) if idx not in removed]
    return stmts, total


def _try_inline(func: HirFunc, stmts: list[HirStmt], i: int) -> bool:
    """Inline the definition at *i* into its single later use; True on success."""
    stmt = stmts[i]
    if not (isinstance(stmt, Assign) and isinstance(stmt.target, LocalTarget)):
        return False
    var_id = stmt.target.var
    rhs = stmt.value
    exprs = func.exprs

    if not func.vars.get(var_id).is_temporary():
        return False
    # Tables and closures are handled by other passes.
    if isinstance(exprs.get(rhs), (Table, Closure)):
        return False
    # A use before the definition (e.g. in a loop body) reads an earlier value.
    if _count_uses(stmts[:i], var_id, exprs) > 0:
        return False

    rhs_has_effects = expr_has_side_effects(func, rhs)
    for j, later in enumerate(stmts[i + 1 :], start=i + 1):
        uses = _uses_in_stmt(later, var_id, exprs)
        if uses:
            if len(uses) != 1:
                return False
            if _count_uses(stmts[j + 1 :], var_id, exprs) > 0:
                return False
            exprs.replace(uses[0], copy.deepcopy(exprs.get(rhs)))
            return True
        if _stmt_defines_var(later, var_id):
            return False
        if rhs_has_effects and _stmt_has_side_effects(later, func):
            return False
    return False


def _uses_in_expr(exprs: ExprArena, root: ExprId, target: VarId) -> list[ExprId]:
    expr = exprs.get(root)
    if isinstance(expr, Var):
        return [root] if expr.var == target else []
    return [
        found
        for child in expr_children(expr)
        for found in _uses_in_expr(exprs, child, target)
    ]


def _uses_in_lvalue(lval: LValue, target: VarId, exprs: ExprArena) -> list[ExprId]:
    if isinstance(lval, FieldTarget):
        return _uses_in_expr(exprs, lval.table, target)
    if isinstance(lval, IndexTarget):
        return _uses_in_expr(exprs, lval.table, target) + _uses_in_expr(
            exprs, lval.key, target
        )
    return []


def _uses_in_exprs(
    exprs: ExprArena, roots: list[ExprId], target: VarId
) -> list[ExprId]:
    return [found for root in roots for found in _uses_in_expr(exprs, root, target)]


def _uses_in_body(
    body: list[HirStmt], target: VarId, exprs: ExprArena
) -> list[ExprId]:
    return [found for s in body for found in _uses_in_stmt(s, target, exprs)]


def _uses_in_stmt(stmt: HirStmt, target: VarId, exprs: ExprArena) -> list[ExprId]:
    """Expression slots holding `Var(target)` read by the statement, nested bodies included.

    The local being assigned is not a use; table and key parts of targets are.
    """
    match stmt:
        case Assign(target=lval, value=value) | CompoundAssign(
            target=lval, value=value
        ):
            return _uses_in_expr(exprs, value, target) + _uses_in_lvalue(
                lval, target, exprs
            )
        case MultiAssign(targets=targets, values=values):
            return _uses_in_exprs(exprs, values, target) + [
                found for t in targets for found in _uses_in_lvalue(t, target, exprs)
            ]
        case LocalDecl(init=init):
            return [] if init is None else _uses_in_expr(exprs, init, target)
        case MultiLocalDecl(values=values) | Return(values=values):
            return _uses_in_exprs(exprs, values, target)
        case ExprStmt(expr=expr):
            return _uses_in_expr(exprs, expr, target)
        case If():
            out = _uses_in_expr(exprs, stmt.condition, target)
            out += _uses_in_body(stmt.then_body, target, exprs)
            for clause in stmt.elseif_clauses:
                out += _uses_in_expr(exprs, clause.condition, target)
                out += _uses_in_body(clause.body, target, exprs)
            if stmt.else_body is not None:
                out += _uses_in_body(stmt.else_body, target, exprs)
            return out
        case While(condition=condition, body=body):
            return _uses_in_expr(exprs, condition, target) + _uses_in_body(
                body, target, exprs
            )
        case Repeat(condition=condition, body=body):
            return _uses_in_body(body, target, exprs) + _uses_in_expr(
                exprs, condition, target
            )
        case NumericFor():
            roots = [stmt.start, stmt.limit]
            if stmt.step is not None:
                roots.append(stmt.step)
            return _uses_in_exprs(exprs, roots, target) + _uses_in_body(
                stmt.body, target, exprs
            )
        case GenericFor(iterators=iterators, body=body):
            return _uses_in_exprs(exprs, iterators, target) + _uses_in_body(
                body, target, exprs
            )
        case FunctionDef(func_expr=func_expr) | LocalFunctionDef(func_expr=func_expr):
            return _uses_in_expr(exprs, func_expr, target)
    return []


def _count_uses(stmts: list[HirStmt], target: VarId, exprs: ExprArena) -> int:
    return sum(len(_uses_in_stmt(s, target, exprs)) for s in stmts)


def _stmt_defines_var(stmt: HirStmt, var_id: VarId) -> bool:
    match stmt:
        case Assign(target=LocalTarget(var=v)):
            return v == var_id
        case MultiAssign(targets=targets):
            return any(isinstance(t, LocalTarget) and t.var == var_id for t in targets)
        case LocalDecl(var=v):
            return v == var_id
        case MultiLocalDecl(vars=variables):
            return var_id in variables
    return any(
        _stmt_defines_var(s, var_id) for body in nested_bodies(stmt) for s in body
    )


def _stmt_has_side_effects(stmt: HirStmt, func: HirFunc) -> bool:
    match stmt:
        case Assign(value=value) | CompoundAssign(value=value):
            return expr_has_side_effects(func, value)
        case MultiAssign(values=values) | MultiLocalDecl(values=values):
            return any(expr_has_side_effects(func, v) for v in values)
        case LocalDecl(init=init):
            return init is not None and expr_has_side_effects(func, init)
        case ExprStmt(expr=expr):
            return expr_has_side_effects(func, expr)
        case CloseUpvals() | RegAssign():
            return False
        case (
            Return()
            | Break()
            | Continue()
            | If()
            | While()
            | Repeat()
            | NumericFor()
            | GenericFor()
            | FunctionDef()
            | LocalFunctionDef()
        ):
            return True
    return False