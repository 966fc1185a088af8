"""Variables recovered from register accesses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

# `continue` is context-sensitive in Luau and therefore a valid identifier.
_LUAU_KEYWORDS = frozenset(
    {
        "and",
        "break",
        "do",
        "else",
        "elseif",
        "end",
        "false",
        "for",
        "function",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "until",
        "while",
    }
)


def is_luau_keyword(name: str) -> bool:
    """Return True if *name* is a reserved Luau keyword."""
    return name in _LUAU_KEYWORDS


@dataclass(frozen=True, order=True)
class VarId:
    """Opaque variable identifier, an index into a VarTable."""

    index: int


@dataclass(frozen=True)
class RegRef:
    """A raw register access before variable recovery."""

    register: int
    pc: int
    has_aux: bool = False


@dataclass
class VarInfo:
    """Metadata about a single recovered variable."""

    name: str | None = None
    is_param: bool = False
    is_loop_var: bool = False
    def_pcs: list[int] = field(default_factory=list)
    use_pcs: list[int] = field(default_factory=list)
    scope_pcs: list[range] = field(default_factory=list)
    decl_pc: int | None = None

    def earliest_scope_start(self) -> int | None:
        """The smallest scope start PC, or None without scopes."""
        return min((r.start for r in self.scope_pcs), default=None)

    def pc_in_scope(self, pc: int) -> bool:
        """True if *pc* lies within any of the scope ranges."""
        return any(r.start <= pc < r.stop for r in self.scope_pcs)

    def is_temporary(self) -> bool:
        """True for unnamed, non-parameter, non-loop variables."""
        return self.name is None and not self.is_param and not self.is_loop_var

    def display_name(self, var_id: VarId) -> str:
        """The debug name (keywords prefixed with `_`), else `_v<id>`."""
        if self.name is None:
            return f"_v{var_id.index}"
        if is_luau_keyword(self.name):
            return f"_{self.name}"
        return self.name


class VarTable:
    """All variables of a function, indexed by VarId."""

    def __init__(self) -> None:
        self._vars: list[VarInfo] = []
        self._reg_map: dict[RegRef, VarId] = {}

    def alloc(self, info: VarInfo | None = None) -> VarId:
        """Store a new variable and return its id."""
        var_id = VarId(len(self._vars))
        self._vars.append(info if info is not None else VarInfo())
        return var_id

    def get(self, var_id: VarId) -> VarInfo:
        """Return the info for *var_id*; raises IndexError if unknown."""
        if not 0 <= var_id.index < len(self._vars):
            raise IndexError(f"unknown variable {var_id.index}")
        return self._vars[var_id.index]

    def bind_reg(self, reg: RegRef, var_id: VarId) -> None:
        """Map a register access to a variable."""
        self._reg_map[reg] = var_id

    def lookup_reg(self, reg: RegRef) -> VarId | None:
        """Return the variable a register access maps to, if any."""
        return self._reg_map.get(reg)

    def temporaries(self) -> Iterator[VarId]:
        """Yield the ids of all temporary variables."""
        return (VarId(i) for i, info in enumerate(self._vars) if info.is_temporary())

    def __iter__(self) -> Iterator[tuple[VarId, VarInfo]]:
        return ((VarId(i), info) for i, info in enumerate(self._vars))

    def __len__(self) -> int:
        return len(self._vars)