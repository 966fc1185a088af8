"""Control flow graph of basic blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union

from lantern.expr import ExprId
from lantern.stmt import HirStmt
from lantern.var import VarId

NodeIndex = int


class ForGenVariant(Enum):
    """Which FORGPREP variant set up a generic for-loop."""

    GENERIC = "generic"
    IPAIRS = "ipairs"
    PAIRS = "pairs"


class EdgeKind(Enum):
    """What kind of control flow an edge represents."""

    UNCONDITIONAL = "unconditional"
    THEN = "then"
    ELSE = "else"
    LOOP_BACK = "loop_back"
    LOOP_EXIT = "loop_exit"


@dataclass
class NoTerminator:
    """The block has no terminator yet."""


@dataclass
class Jump:
    """Unconditional jump."""


@dataclass
class Branch:
    """Conditional branch; `negated` records a negated jump in the bytecode."""

    condition: ExprId
    negated: bool = False


@dataclass
class Return:
    """Return from the function."""

    values: list[ExprId] = field(default_factory=list)


@dataclass
class ForNumPrep:
    """Numeric for-loop setup."""

    base_reg: int
    start: ExprId
    limit: ExprId
    step: ExprId | None = None
    loop_var_name: str | None = None


@dataclass
class ForNumBack:
    """Numeric for-loop back-edge."""

    base_reg: int


@dataclass
class ForGenBack:
    """Generic for-loop back-edge."""

    base_reg: int
    var_count: int
    iterators: list[ExprId] = field(default_factory=list)
    loop_var_names: list[str | None] = field(default_factory=list)
    variant: ForGenVariant = ForGenVariant.GENERIC


Terminator = Union[
    NoTerminator, Jump, Branch, Return, ForNumPrep, ForNumBack, ForGenBack
]


@dataclass
class HirBlock:
    """A basic block: statements executed in order, then a terminator."""

    stmts: list[HirStmt] = field(default_factory=list)
    terminator: Terminator = field(default_factory=NoTerminator)
    pc_range: tuple[int, int] = (0, 0)
    for_gen_iterators: list[ExprId] | None = None
    for_gen_variant: ForGenVariant | None = None
    has_empty_else_jump: bool = False


@dataclass
class HirEdge:
    """Edge metadata, with values flowing into the successor's parameters."""

    kind: EdgeKind
    args: list[tuple[VarId, ExprId]] = field(default_factory=list)

    @classmethod
    def unconditional(cls) -> HirEdge:
        """An unconditional or fallthrough edge."""
        return cls(EdgeKind.UNCONDITIONAL)

    @classmethod
    def then_edge(cls) -> HirEdge:
        """An edge taken when the condition is true."""
        return cls(EdgeKind.THEN)

    @classmethod
    def else_edge(cls) -> HirEdge:
        """An edge taken when the condition is false."""
        return cls(EdgeKind.ELSE)


@dataclass
class Edge:
    """A directed edge between two nodes of a CfgGraph."""

    source: NodeIndex
    target: NodeIndex
    weight: HirEdge


class CfgGraph:
    """Directed graph of blocks whose node indices survive node removal."""

    def __init__(self) -> None:
        self._nodes: dict[NodeIndex, HirBlock] = {}
        self._edges: list[Edge] = []
        self._next_index = 0

    def _check(self, node: NodeIndex) -> None:
        if node not in self._nodes:
            raise KeyError(f"unknown node {node}")

    def add_node(self, block: HirBlock | None = None) -> NodeIndex:
        """Add a block and return its index."""
        index = self._next_index
        self._next_index += 1
        self._nodes[index] = block if block is not None else HirBlock()
        return index

    def add_edge(self, source: NodeIndex, target: NodeIndex, edge: HirEdge) -> Edge:
        """Connect *source* to *target*; both nodes must exist."""
        self._check(source)
        self._check(target)
        new_edge = Edge(source, target, edge)
        self._edges.append(new_edge)
        return new_edge

    def remove_node(self, node: NodeIndex) -> HirBlock:
        """Remove a node with all edges touching it and return its block."""
        self._check(node)
        self._edges = [
            e for e in self._edges if e.source != node and e.target != node
        ]
        return self._nodes.pop(node)

    def node_indices(self) -> list[NodeIndex]:
        """The indices of all live nodes, in ascending order."""
        return sorted(self._nodes)

    def node_count(self) -> int:
        """The number of live nodes."""
        return len(self._nodes)

    def edges(self, node: NodeIndex) -> list[Edge]:
        """The outgoing edges of *node*."""
        self._check(node)
        return [e for e in self._edges if e.source == node]

    def __getitem__(self, node: NodeIndex) -> HirBlock:
        self._check(node)
        return self._nodes[node]

    def __setitem__(self, node: NodeIndex, block: HirBlock) -> None:
        self._check(node)
        self._nodes[node] = block

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __iter__(self) -> Iterator[NodeIndex]:
        return iter(self.node_indices())


def _successor(graph: CfgGraph, node: NodeIndex, kind: EdgeKind) -> NodeIndex | None:
    return next((e.target for e in graph.edges(node) if e.weight.kind is kind), None)


def then_successor(graph: CfgGraph, node: NodeIndex) -> NodeIndex | None:
    """The target of the "then" edge of *node*, if any."""
    return _successor(graph, node, EdgeKind.THEN)


def else_successor(graph: CfgGraph, node: NodeIndex) -> NodeIndex | None:
    """The target of the "else" edge of *node*, if any."""
    return _successor(graph, node, EdgeKind.ELSE)


def unconditional_successor(graph: CfgGraph, node: NodeIndex) -> NodeIndex | None:
    """The target of the unconditional edge of *node*, if any."""
    return _successor(graph, node, EdgeKind.UNCONDITIONAL)