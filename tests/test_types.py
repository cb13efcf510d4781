import pytest

from candlesim.types import Direction


def test_opposite_and_sign():
    assert Direction.UP.opposite() is Direction.DOWN
    assert Direction.DOWN.opposite() is Direction.UP
    assert Direction.UP.sign == 1
    assert Direction.DOWN.sign == -1


@pytest.mark.parametrize("raw", ["up", "UP", " Up ", Direction.UP])
def test_parse_accepts_values(raw):
    assert Direction.parse(raw) is Direction.UP


def test_parse_rejects_unknown():
    with pytest.raises(ValueError, match="Unsupported direction: 'sideways'"):
        Direction.parse("sideways")
