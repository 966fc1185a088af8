import pytest

from lantern.types import BinOp, CaptureKind, UnOp, Vector


@pytest.mark.parametrize("enum_cls", [BinOp, UnOp, CaptureKind])
def test_enum_name_and_value_round_trip(enum_cls):
    for member in enum_cls:
        assert enum_cls[member.name] is member
        assert enum_cls(member.value) is member


@pytest.mark.parametrize("enum_cls", [BinOp, UnOp, CaptureKind])
def test_enum_values_are_unique(enum_cls):
    values = [member.value for member in enum_cls]
    assert len(values) == len(set(values))


def test_vector_unpacks_to_components():
    x, y, z = Vector(1.5, -2.0, 0.25)
    assert (x, y, z) == (1.5, -2.0, 0.25)


def test_vector_equality_and_hash():
    a = Vector(1.0, 2.0, 3.0)
    b = Vector(1.0, 2.0, 3.0)
    assert a == b
    assert {a: "first"}[b] == "first"


def test_vector_is_immutable():
    v = Vector(0.0, 0.0, 0.0)
    with pytest.raises(AttributeError):
        v.x = 1.0
    assert v.x == 0.0
    assert v == Vector(0.0, 0.0, 0.0)