from lantern.expr import FieldAccess, Global, Literal, Table, Var
from lantern.func import HirFunc
from lantern.stmt import (
    Assign,
    FieldTarget,
    If,
    IndexTarget,
    LocalDecl,
    LocalTarget,
    Return,
)
from lantern.table_fold import fold_table_constructors
from lantern.var import VarInfo


def _setup(table=None):
    func = HirFunc()
    v = func.vars.alloc(VarInfo())
    t = func.exprs.alloc(table if table is not None else Table())
    return func, v, t


def _index_write(func, v, key_value, value_expr):
    ref = func.exprs.alloc(Var(v))
    key = func.exprs.alloc(Literal(key_value))
    val = func.exprs.alloc(value_expr)
    return Assign(IndexTarget(ref, key), val), ref, key, val


def test_folds_index_and_field_writes():
    func, v, t = _setup()
    w1, ref1, _, val1 = _index_write(func, v, 1.0, Literal(b"a"))
    ref2 = func.exprs.alloc(Var(v))
    val2 = func.exprs.alloc(Literal(True))
    w2 = Assign(FieldTarget(ref2, "name"), val2)
    ret = Return([func.exprs.alloc(Var(v))])
    decl = LocalDecl(v, t)
    func.cfg[func.entry].stmts = [decl, w1, w2, ret]

    fold_table_constructors(func)

    assert func.cfg[func.entry].stmts == [decl, ret]
    table = func.exprs.get(t)
    assert table.array == [val1]
    assert len(table.hash) == 1
    key, value = table.hash[0]
    assert func.exprs.get(key) == Literal(b"name")
    assert value == val2
    assert func.exprs.get(ref1) == Literal(None)
    assert func.exprs.get(ref2) == Literal(None)


def test_non_sequential_index_goes_to_hash():
    func, v, t = _setup()
    w, _, _, val = _index_write(func, v, 3.0, Literal(b"x"))
    func.cfg[func.entry].stmts = [Assign(LocalTarget(v), t), w]

    fold_table_constructors(func)

    table = func.exprs.get(t)
    assert table.array == []
    key, value = table.hash[0]
    assert func.exprs.get(key) == Literal(3.0)
    assert value == val
    assert len(func.cfg[func.entry].stmts) == 1


def test_appends_after_existing_array_items():
    func = HirFunc()
    v = func.vars.alloc(VarInfo())
    first = func.exprs.alloc(Literal(b"first"))
    t = func.exprs.alloc(Table(array=[first]))
    w, _, _, val = _index_write(func, v, 2.0, Literal(b"second"))
    func.cfg[func.entry].stmts = [LocalDecl(v, t), w]

    fold_table_constructors(func)

    assert func.exprs.get(t).array == [first, val]
    assert func.exprs.get(t).hash == []


def test_fractional_key_kept_as_expression():
    func, v, t = _setup()
    w, _, key, val = _index_write(func, v, 1.5, Literal(b"x"))
    func.cfg[func.entry].stmts = [LocalDecl(v, t), w]

    fold_table_constructors(func)

    assert func.exprs.get(t).hash == [(key, val)]


def test_self_reference_blocks_fold():
    func, v, t = _setup()
    inner = func.exprs.alloc(Var(v))
    w, _, _, _ = _index_write(func, v, 1.0, FieldAccess(inner, "x"))
    decl = LocalDecl(v, t)
    func.cfg[func.entry].stmts = [decl, w]

    fold_table_constructors(func)

    assert func.cfg[func.entry].stmts == [decl, w]
    assert func.exprs.get(t) == Table()


def test_multiple_remaining_uses_block_fold():
    func, v, t = _setup()
    w, ref, _, _ = _index_write(func, v, 1.0, Global("g"))
    ret = Return([func.exprs.alloc(Var(v)), func.exprs.alloc(Var(v))])
    decl = LocalDecl(v, t)
    func.cfg[func.entry].stmts = [decl, w, ret]

    fold_table_constructors(func)

    assert func.cfg[func.entry].stmts == [decl, w, ret]
    assert func.exprs.get(t) == Table()
    assert func.exprs.get(ref) == Var(v)


def test_non_table_definition_untouched():
    func = HirFunc()
    v = func.vars.alloc(VarInfo())
    g = func.exprs.alloc(Global("tbl"))
    w, _, _, _ = _index_write(func, v, 1.0, Literal(b"x"))
    stmts = [LocalDecl(v, g), w]
    func.cfg[func.entry].stmts = list(stmts)

    fold_table_constructors(func)

    assert func.cfg[func.entry].stmts == stmts


def test_folds_inside_nested_body():
    func, v, t = _setup()
    w, _, _, val = _index_write(func, v, 1.0, Literal(b"x"))
    cond = func.exprs.alloc(Literal(True))
    decl = LocalDecl(v, t)
    func.cfg[func.entry].stmts = [If(cond, then_body=[decl, w])]

    fold_table_constructors(func)

    assert func.cfg[func.entry].stmts[0].then_body == [decl]
    assert func.exprs.get(t).array == [val]