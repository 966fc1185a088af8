from lantern.expr import ExprId, Literal
from lantern.func import HirFunc


def test_new_function_has_empty_entry_block():
    func = HirFunc(3)
    assert func.proto_index == 3
    assert func.cfg.node_count() == 1
    assert func.cfg.node_indices() == [func.entry]
    assert func.cfg[func.entry].stmts == []
    assert len(func.exprs) == 0
    assert len(func.vars) == 0
    assert func.structured is False
    assert func.params == []


def test_origin_round_trip():
    func = HirFunc()
    eid = func.exprs.alloc(Literal(1.0))
    func.set_origin_expr(eid, 17)
    assert func.get_origin_expr(eid) == 17


def test_missing_origin_is_none():
    func = HirFunc()
    assert func.get_origin_expr(ExprId(5)) is None


def test_origin_overwritten():
    func = HirFunc()
    eid = func.exprs.alloc(Literal(None))
    func.set_origin_expr(eid, 2)
    func.set_origin_expr(eid, 8)
    assert func.get_origin_expr(eid) == 8