import pytest

from lantern.var import RegRef, VarId, VarInfo, VarTable, is_luau_keyword


def test_keyword_detection():
    assert is_luau_keyword("end")
    assert is_luau_keyword("function")
    assert not is_luau_keyword("continue")
    assert not is_luau_keyword("value")


def test_default_info_is_temporary():
    assert VarInfo().is_temporary()


@pytest.mark.parametrize(
    "info",
    [VarInfo(name="x"), VarInfo(is_param=True), VarInfo(is_loop_var=True)],
)
def test_named_param_and_loop_vars_are_not_temporaries(info):
    assert not info.is_temporary()


def test_display_name_unnamed_uses_id():
    assert VarInfo().display_name(VarId(7)) == "_v7"


def test_display_name_keyword_is_prefixed():
    assert VarInfo(name="end").display_name(VarId(0)) == "_end"


def test_display_name_plain_name_unchanged():
    assert VarInfo(name="count").display_name(VarId(3)) == "count"
    assert VarInfo(name="continue").display_name(VarId(3)) == "continue"


def test_earliest_scope_start():
    assert VarInfo().earliest_scope_start() is None
    info = VarInfo(scope_pcs=[range(10, 20), range(4, 8)])
    assert info.earliest_scope_start() == 4


def test_pc_in_scope_is_half_open():
    info = VarInfo(scope_pcs=[range(4, 8), range(10, 20)])
    assert info.pc_in_scope(4)
    assert info.pc_in_scope(19)
    assert not info.pc_in_scope(8)
    assert not info.pc_in_scope(20)
    assert not info.pc_in_scope(3)


def test_alloc_and_get_round_trip():
    table = VarTable()
    first = VarInfo(name="a")
    second = VarInfo(name="b")
    a = table.alloc(first)
    b = table.alloc(second)
    assert a != b
    assert table.get(a) is first
    assert table.get(b) is second
    assert len(table) == 2


def test_get_unknown_raises():
    table = VarTable()
    table.alloc()
    with pytest.raises(IndexError):
        table.get(VarId(5))
    with pytest.raises(IndexError):
        table.get(VarId(-1))


def test_get_returns_mutable_info():
    table = VarTable()
    v = table.alloc()
    table.get(v).name = "renamed"
    assert table.get(v).name == "renamed"


def test_bind_and_lookup_reg():
    table = VarTable()
    v = table.alloc()
    reg = RegRef(register=2, pc=14)
    table.bind_reg(reg, v)
    assert table.lookup_reg(RegRef(register=2, pc=14)) == v
    assert table.lookup_reg(RegRef(register=2, pc=14, has_aux=True)) is None


def test_temporaries_filters_named():
    table = VarTable()
    t1 = table.alloc()
    table.alloc(VarInfo(name="x"))
    t2 = table.alloc()
    table.alloc(VarInfo(is_param=True))
    assert list(table.temporaries()) == [t1, t2]


def test_iteration_yields_ids_and_infos():
    table = VarTable()
    infos = [VarInfo(name="p"), VarInfo(), VarInfo(name="q")]
    ids = [table.alloc(info) for info in infos]
    pairs = list(table)
    assert [vid for vid, _ in pairs] == ids
    assert all(table.get(vid) is info for vid, info in pairs)