"""Flat storage of a function's expressions."""

from __future__ import annotations

import copy
from typing import Iterator, Mapping

from lantern.expr import Binary, ExprId, HirExpr, Unary, Var
from lantern.types import BinOp, UnOp
from lantern.var import VarId

_INVERTED = {
    BinOp.COMPARE_EQ: BinOp.COMPARE_NE,
    BinOp.COMPARE_NE: BinOp.COMPARE_EQ,
    BinOp.COMPARE_LT: BinOp.COMPARE_GE,
    BinOp.COMPARE_LE: BinOp.COMPARE_GT,
    BinOp.COMPARE_GT: BinOp.COMPARE_LE,
    BinOp.COMPARE_GE: BinOp.COMPARE_LT,
}


class ExprArena:
    """Expressions stored flat; substitution overwrites a slot in place."""

    def __init__(self) -> None:
        self._exprs: list[HirExpr] = []

    def _slot(self, expr_id: ExprId) -> int:
        if not 0 <= expr_id.index < len(self._exprs):
            raise IndexError(f"unknown expression {expr_id.index}")
        return expr_id.index

    def alloc(self, expr: HirExpr) -> ExprId:
        """Store *expr* and return its id."""
        self._exprs.append(expr)
        return ExprId(len(self._exprs) - 1)

    def get(self, expr_id: ExprId) -> HirExpr:
        """Return the expression stored at *expr_id*."""
        return self._exprs[self._slot(expr_id)]

    def replace(self, expr_id: ExprId, expr: HirExpr) -> None:
        """Overwrite the slot at *expr_id*."""
        self._exprs[self._slot(expr_id)] = expr

    def substitute_var(self, var_id: VarId, replacement: ExprId) -> None:
        """Replace every `Var(var_id)` with a copy of the replacement."""
        self.substitute_vars_batch({var_id: replacement})

    def substitute_vars_batch(self, subs: Mapping[VarId, ExprId]) -> None:
        """Replace several variables with copies of their expressions in one pass."""
        if not subs:
            return
        for i, expr in enumerate(self._exprs):
            if isinstance(expr, Var) and expr.var in subs:
                source = self._exprs[self._slot(subs[expr.var])]
                self._exprs[i] = copy.deepcopy(source)

    def negate_condition(self, condition: ExprId) -> ExprId:
        """Return an expression for the logical inverse of *condition*."""
        expr = self.get(condition)
        if isinstance(expr, Unary) and expr.op is UnOp.NOT:
            return expr.operand
        if isinstance(expr, Binary) and expr.op in _INVERTED:
            return self.alloc(Binary(_INVERTED[expr.op], expr.left, expr.right))
        return self.alloc(Unary(UnOp.NOT, condition))

    def __len__(self) -> int:
        return len(self._exprs)

    def __iter__(self) -> Iterator[tuple[ExprId, HirExpr]]:
        return ((ExprId(i), expr) for i, expr in enumerate(self._exprs))