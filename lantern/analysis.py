"""Queries over a function's expressions and statements used by the inlining passes."""

from __future__ import annotations

from lantern.cfg import Branch, ForGenBack, ForNumPrep, NodeIndex
from lantern.cfg import Return as ReturnTerminator
from lantern.expr import (
    Call,
    CaptureVar,
    Closure,
    ExprId,
    FieldAccess,
    IndexAccess,
    MethodCall,
    Var,
    expr_children,
)
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


def expr_has_side_effects(func: HirFunc, expr_id: ExprId) -> bool:
    """True if evaluating the expression may have observable effects."""
    expr = func.exprs.get(expr_id)
    if isinstance(expr, (Call, MethodCall, Closure)):
        return True
    return any(expr_has_side_effects(func, child) for child in expr_children(expr))


def is_statement_expr(func: HirFunc, expr_id: ExprId) -> bool:
    """True if the expression can stand alone as a statement (a call)."""
    return isinstance(func.exprs.get(expr_id), (Call, MethodCall))


def collect_side_effect_calls(func: HirFunc, expr_id: ExprId) -> list[ExprId]:
    """The outermost call expressions inside an expression tree, in order."""
    found: list[ExprId] = []

    def walk(eid: ExprId) -> None:
        expr = func.exprs.get(eid)
        if isinstance(expr, (Call, MethodCall)):
            found.append(eid)
            return
        for child in expr_children(expr):
            walk(child)

    walk(expr_id)
    return found


def _is_var(func: HirFunc, expr_id: ExprId, var_id: VarId) -> bool:
    expr = func.exprs.get(expr_id)
    return isinstance(expr, Var) and expr.var == var_id


def _lvalue_has_var_table(target: LValue, func: HirFunc, var_id: VarId) -> bool:
    return isinstance(target, (FieldTarget, IndexTarget)) and _is_var(
        func, target.table, var_id
    )


def _stmt_uses_var_as_table(stmt: HirStmt, func: HirFunc, var_id: VarId) -> bool:
    match stmt:
        case Assign(target=target) | CompoundAssign(target=target):
            return _lvalue_has_var_table(target, func, var_id)
        case MultiAssign(targets=targets):
            return any(_lvalue_has_var_table(t, func, var_id) for t in targets)
    return any(
        _stmt_uses_var_as_table(s, func, var_id)
        for body in nested_bodies(stmt)
        for s in body
    )


def is_var_used_as_table_target(func: HirFunc, var_id: VarId) -> bool:
    """True if the variable is indexed, either when read or as an assignment target."""
    for _, expr in func.exprs:
        if isinstance(expr, (FieldAccess, IndexAccess)) and _is_var(
            func, expr.table, var_id
        ):
            return True
    return any(
        _stmt_uses_var_as_table(stmt, func, var_id)
        for node in func.cfg.node_indices()
        for stmt in func.cfg[node].stmts
    )


def count_uses(func: HirFunc) -> dict[VarId, int]:
    """How often each variable is read: Var nodes plus closure captures."""
    counts: dict[VarId, int] = {}
    for _, expr in func.exprs:
        if isinstance(expr, Var):
            counts[expr.var] = counts.get(expr.var, 0) + 1
        elif isinstance(expr, Closure):
            for capture in expr.captures:
                if isinstance(capture.source, CaptureVar):
                    var = capture.source.var
                    counts[var] = counts.get(var, 0) + 1
    return counts


def _lvalue_expr_ids(target: LValue) -> list[ExprId]:
    if isinstance(target, FieldTarget):
        return [target.table]
    if isinstance(target, IndexTarget):
        return [target.table, target.key]
    return []


def collect_stmt_expr_ids(stmts: list[HirStmt]) -> list[ExprId]:
    """Every expression id referenced directly by the statements, nested bodies included."""
    out: list[ExprId] = []
    for stmt in stmts:
        match stmt:
            case Assign(target=target, value=value):
                out += _lvalue_expr_ids(target)
                out.append(value)
            case LocalDecl(init=init):
                if init is not None:
                    out.append(init)
            case MultiLocalDecl(values=values):
                out += values
            case MultiAssign(targets=targets, values=values):
                for target in targets:
                    out += _lvalue_expr_ids(target)
                out += values
            case CompoundAssign(target=target, value=value):
                out += _lvalue_expr_ids(target)
                out.append(value)
            case ExprStmt(expr=expr):
                out.append(expr)
            case Return(values=values):
                out += values
            case FunctionDef(name=name, func_expr=func_expr):
                out += _lvalue_expr_ids(name)
                out.append(func_expr)
            case LocalFunctionDef(func_expr=func_expr):
                out.append(func_expr)
            case RegAssign(value=value):
                out.append(value)
            case If():
                out.append(stmt.condition)
                out += collect_stmt_expr_ids(stmt.then_body)
                for clause in stmt.elseif_clauses:
                    out.append(clause.condition)
                    out += collect_stmt_expr_ids(clause.body)
                if stmt.else_body is not None:
                    out += collect_stmt_expr_ids(stmt.else_body)
            case While(condition=condition, body=body) | Repeat(
                condition=condition, body=body
            ):
                out.append(condition)
                out += collect_stmt_expr_ids(body)
            case NumericFor():
                out += [stmt.start, stmt.limit]
                if stmt.step is not None:
                    out.append(stmt.step)
                out += collect_stmt_expr_ids(stmt.body)
            case GenericFor(iterators=iterators, body=body):
                out += iterators
                out += collect_stmt_expr_ids(body)
    return out


def build_use_blocks(func: HirFunc) -> dict[VarId, set[NodeIndex]]:
    """Map each variable to the blocks whose statements or terminator read it."""
    result: dict[VarId, set[NodeIndex]] = {}

    for node in func.cfg.node_indices():
        block = func.cfg[node]
        roots = collect_stmt_expr_ids(block.stmts)
        match block.terminator:
            case Branch(condition=condition):
                roots.append(condition)
            case ReturnTerminator(values=values):
                roots += values
            case ForNumPrep(start=start, limit=limit, step=step):
                roots += [start, limit]
                if step is not None:
                    roots.append(step)
            case ForGenBack(iterators=iterators):
                roots += iterators

        visited: set[ExprId] = set()
        pending = list(roots)
        while pending:
            eid = pending.pop()
            if eid in visited:
                continue
            visited.add(eid)
            expr = func.exprs.get(eid)
            if isinstance(expr, Var):
                result.setdefault(expr.var, set()).add(node)
            elif isinstance(expr, Closure):
                for capture in expr.captures:
                    if isinstance(capture.source, CaptureVar):
                        result.setdefault(capture.source.var, set()).add(node)
            else:
                pending.extend(expr_children(expr))

    return result