"""The per-function HIR container."""

from __future__ import annotations

from typing import Any

from lantern.arena import ExprArena
from lantern.cfg import CfgGraph, HirBlock, NodeIndex
from lantern.expr import ExprId
from lantern.var import VarId, VarTable


class HirFunc:
    """A function: its CFG, expression arena, variables and metadata."""

    def __init__(self, proto_index: int = 0) -> None:
        self.cfg = CfgGraph()
        self.entry: NodeIndex = self.cfg.add_node(HirBlock())
        self.exprs = ExprArena()
        self.vars = VarTable()
        self.params: list[VarId] = []
        self.is_vararg = False
        self.num_upvalues = 0
        self.proto_index = proto_index
        self.origins: dict[int, int] = {}
        self.upvalue_names: list[str | None] = []
        self.name: str | None = None
        self.structured = False
        self.line_info: Any = None
        self.type_info = b""

    def set_origin_expr(self, expr_id: ExprId, pc: int) -> None:
        """Record the bytecode PC an expression came from."""
        self.origins[expr_id.index] = pc

    def get_origin_expr(self, expr_id: ExprId) -> int | None:
        """The bytecode PC an expression came from, if recorded."""
        return self.origins.get(expr_id.index)