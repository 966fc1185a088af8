import pytest

from lantern.expr import ExprId
from lantern.stmt import (
    Assign,
    Break,
    ElseIfClause,
    ExprStmt,
    GenericFor,
    If,
    LocalDecl,
    LocalTarget,
    NumericFor,
    Repeat,
    Return,
    While,
    nested_bodies,
)
from lantern.var import VarId

E0, E1, E2 = ExprId(0), ExprId(1), ExprId(2)


def test_if_bodies_in_order_and_identity():
    then_body = [ExprStmt(E1)]
    clause = ElseIfClause(E2, [Break()])
    else_body = [Return([E0])]
    stmt = If(E0, then_body, [clause], else_body)
    bodies = nested_bodies(stmt)
    assert len(bodies) == 3
    assert bodies[0] is then_body
    assert bodies[1] is clause.body
    assert bodies[2] is else_body


def test_if_without_else_omits_it():
    stmt = If(E0, [ExprStmt(E1)])
    assert nested_bodies(stmt) == [[ExprStmt(E1)]]


@pytest.mark.parametrize(
    "stmt",
    [
        While(E0, [Break()]),
        Repeat([Break()], E0),
        NumericFor(VarId(0), E0, E1, None, [Break()]),
        GenericFor([VarId(0)], [E0], [Break()]),
    ],
)
def test_loop_bodies(stmt):
    bodies = nested_bodies(stmt)
    assert len(bodies) == 1
    assert bodies[0] is stmt.body


@pytest.mark.parametrize(
    "stmt",
    [Break(), ExprStmt(E0), LocalDecl(VarId(0), E1), Assign(LocalTarget(VarId(1)), E2)],
)
def test_leaf_statements_have_no_bodies(stmt):
    assert nested_bodies(stmt) == []


def test_mutating_returned_body_updates_statement():
    stmt = While(E0)
    nested_bodies(stmt)[0].append(ExprStmt(E1))
    assert stmt.body == [ExprStmt(E1)]


def test_statement_equality():
    assert Assign(LocalTarget(VarId(2)), E1) == Assign(LocalTarget(VarId(2)), E1)
    assert not Assign(LocalTarget(VarId(2)), E1) == Assign(LocalTarget(VarId(3)), E1)