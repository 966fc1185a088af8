"""Literal values and operator kinds used by the HIR."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Union


class Vector(NamedTuple):
    """A Luau vector constant."""

    x: float
    y: float
    z: float


LuaValue = Union[None, bool, float, bytes, Vector]
"""A literal value: nil, boolean, number, string bytes or vector."""


class BinOp(Enum):
    """Binary operators."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    FLOOR_DIV = "//"
    MOD = "%"
    POW = "^"
    CONCAT = ".."
    COMPARE_NE = "~="
    COMPARE_EQ = "=="
    COMPARE_LT = "<"
    COMPARE_LE = "<="
    COMPARE_GT = ">"
    COMPARE_GE = ">="
    AND = "and"
    OR = "or"


class UnOp(Enum):
    """Unary operators."""

    NOT = "not"
    MINUS = "-"
    LEN = "#"


class CaptureKind(Enum):
    """How a closure captures an upvalue."""

    VAL = "val"
    REF = "ref"
    UPVAL = "upval"