"""Eliminate compiler temporaries by inlining their defining expressions."""

from __future__ import annotations

from dataclasses import dataclass, field

from lantern.analysis import (
    build_use_blocks,
    collect_side_effect_calls,
    count_uses,
    expr_has_side_effects,
    is_statement_expr,
    is_var_used_as_table_target,
)
from lantern.cfg import NodeIndex
from lantern.expr import ExprId, Table
from lantern.func import HirFunc
from lantern.stmt import (
    Assign,
    ExprStmt,
    HirStmt,
    LocalDecl,
    LocalTarget,
    nested_bodies,
)
from lantern.var import VarId

_MAX_PASSES = 100


@dataclass
class _Candidates:
    single_use: dict[VarId, ExprId] = field(default_factory=dict)
    dead_stores: set[VarId] = field(default_factory=set)
    dead_calls: set[VarId] = field(default_factory=set)
    dead_call_extracts: set[VarId] = field(default_factory=set)
    def_blocks: dict[VarId, NodeIndex] = field(default_factory=dict)
    multi_def: set[VarId] = field(default_factory=set)

    def total(self) -> int:
        return (
            len(self.single_use)
            + len(self.dead_stores)
            + len(self.dead_calls)
            + len(self.dead_call_extracts)
        )


def eliminate_temporaries(func: HirFunc) -> None:
    """Inline single-use unnamed temporaries and drop dead stores until nothing changes.

    Works on flat CFG blocks as well as on structured, nested statements.
    """
    for _ in range(_MAX_PASSES):
        if _inline_pass(func) == 0:
            break


def _definition(stmt: HirStmt) -> tuple[VarId, ExprId] | None:
    """The (variable, value) defined by a local assignment or initialised declaration."""
    match stmt:
        case Assign(target=LocalTarget(var=var_id), value=value):
            return var_id, value
        case LocalDecl(var=var_id, init=init) if init is not None:
            return var_id, init
    return None


def _inline_pass(func: HirFunc) -> int:
    use_counts = count_uses(func)
    cands = _Candidates()

    for node in func.cfg.node_indices():
        _find_candidates(func.cfg[node].stmts, func, use_counts, cands, node)

    # Before structuring: a definition in one block used in another would
    # leave the defining branch block empty, so keep it.
    if func.cfg.node_count() > 1 and cands.single_use:
        use_blocks = build_use_blocks(func)

        def keep(var_id: VarId) -> bool:
            def_block = cands.def_blocks.get(var_id)
            if def_block is None:
                return True
            return def_block in use_blocks.get(var_id, set())

        cands.single_use = {v: e for v, e in cands.single_use.items() if keep(v)}

    if cands.single_use:
        protected: set[VarId] = set()
        for node in func.cfg.node_indices():
            _check_sole_body(func.cfg[node].stmts, cands, False, protected)
        for var_id in protected:
            cands.single_use.pop(var_id, None)

    total = cands.total()
    if total == 0:
        return 0

    func.exprs.substitute_vars_batch(cands.single_use)

    for node in func.cfg.node_indices():
        block = func.cfg[node]
        block.stmts = _apply_removals(block.stmts, func, cands)

    return total


def _find_candidates(
    stmts: list[HirStmt],
    func: HirFunc,
    use_counts: dict[VarId, int],
    cands: _Candidates,
    block: NodeIndex,
) -> None:
    for stmt in stmts:
        definition = _definition(stmt)
        # Named locals are never inlined: the source had an explicit `local`.
        if definition is not None and func.vars.get(definition[0]).name is None:
            var_id, value = definition
            uses = use_counts.get(var_id, 0)
            if uses == 0:
                if not expr_has_side_effects(func, value):
                    cands.dead_stores.add(var_id)
                elif is_statement_expr(func, value):
                    cands.dead_calls.add(var_id)
                else:
                    cands.dead_call_extracts.add(var_id)
                cands.def_blocks[var_id] = block
            elif uses == 1:
                table_target = isinstance(
                    func.exprs.get(value), Table
                ) and is_var_used_as_table_target(func, var_id)
                if not table_target:
                    # With several definitions the single use may see any of them.
                    if var_id in cands.multi_def:
                        pass
                    elif var_id in cands.single_use:
                        del cands.single_use[var_id]
                        cands.multi_def.add(var_id)
                    else:
                        cands.single_use[var_id] = value
                        cands.def_blocks[var_id] = block

        for body in nested_bodies(stmt):
            _find_candidates(body, func, use_counts, cands, block)


def _is_fully_removed(stmt: HirStmt, cands: _Candidates) -> bool:
    definition = _definition(stmt)
    if definition is None:
        return False
    var_id = definition[0]
    return var_id in cands.single_use or var_id in cands.dead_stores


def _check_sole_body(
    stmts: list[HirStmt],
    cands: _Candidates,
    in_conditional_body: bool,
    protected: set[VarId],
) -> None:
    if in_conditional_body and stmts:
        if all(_is_fully_removed(s, cands) for s in stmts):
            # Keep the last single-use definition so the body is not emptied.
            for stmt in reversed(stmts):
                definition = _definition(stmt)
                if definition is not None and definition[0] in cands.single_use:
                    protected.add(definition[0])
                    break

    for stmt in stmts:
        for body in nested_bodies(stmt):
            _check_sole_body(body, cands, True, protected)


def _apply_removals(
    stmts: list[HirStmt], func: HirFunc, cands: _Candidates
) -> list[HirStmt]:
    result: list[HirStmt] = []
    for stmt in stmts:
        definition = _definition(stmt)
        if definition is not None:
            var_id, value = definition
            if var_id in cands.single_use or var_id in cands.dead_stores:
                continue
            if var_id in cands.dead_calls:
                result.append(ExprStmt(value))
                continue
            if var_id in cands.dead_call_extracts:
                result.extend(
                    ExprStmt(call) for call in collect_side_effect_calls(func, value)
                )
                continue

        for body in nested_bodies(stmt):
            body[:] = _apply_removals(body, func, cands)
        result.append(stmt)
    return result