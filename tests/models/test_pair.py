import pytest

from qnls.models.epr import (
    W_MAX,
    W_MIN,
    EntangledPair,
    PairState,
    ResourceInvariantViolation,
    decay_fidelity,
    fidelity_from_w,
    fidelity_to_w,
)
from qnls.simulator import Time


def test_werner_conversion():
    assert W_MIN == pytest.approx(-1 / 3)
    assert W_MAX == pytest.approx(1.0)
    for f in (0.25, 0.5, 0.9, 1.0):
        assert fidelity_from_w(fidelity_to_w(f)) == pytest.approx(f)
    assert fidelity_from_w(0.0) == 0.25


@pytest.mark.parametrize("f", [0.0, 0.1, 0.25, 0.6, 0.99, 1.0])
def test_decay_never_increases(f: float):
    prev = f
    for t in (0.0, 0.1, 1.0, 10.0, 1000.0):
        v = decay_fidelity(f, 0.3, t)
        assert 0.0 <= v <= prev
        prev = v
    assert decay_fidelity(f, 0.0, 10.0) == f


def test_decay_limit():
    assert decay_fidelity(1.0, 1.0, 1000.0) == pytest.approx(0.25)


def test_pair_lifecycle():
    pair = EntangledPair(3, 0, 2, fidelity=0.9, creation_time=Time(0))
    assert pair.state == PairState.PENDING
    assert pair.is_live
    assert pair.other_end(0) == 2
    assert pair.other_end(2) == 0
    with pytest.raises(ValueError):
        pair.other_end(1)

    with pytest.raises(ResourceInvariantViolation):
        pair.claim()  # PENDING cannot be claimed
    pair.state = PairState.IDLE
    pair.claim()
    assert pair.state == PairState.CLAIMED
    pair.state = PairState.IDLE

    pair.consume()
    assert not pair.is_live
    with pytest.raises(ResourceInvariantViolation, match="consumed twice"):
        pair.consume()
    with pytest.raises(ResourceInvariantViolation):
        pair.state = PairState.IDLE


def test_pair_decay():
    pair = EntangledPair(0, 0, 1, fidelity=1.0, creation_time=Time.from_sec(1.0))
    pair.decay(Time.from_sec(3.0), 0.5)
    assert pair.fidelity == pytest.approx(decay_fidelity(1.0, 0.5, 2.0))
    assert pair.updated == Time.from_sec(3.0)

    f = pair.fidelity
    pair.decay(Time.from_sec(3.0), 0.5)
    assert pair.fidelity == f


def test_same_endpoints():
    p1 = EntangledPair(0, 0, 1, fidelity=1.0, creation_time=Time(0))
    p2 = EntangledPair(1, 1, 0, fidelity=1.0, creation_time=Time(0))
    p3 = EntangledPair(2, 1, 2, fidelity=1.0, creation_time=Time(0))
    assert p1.same_endpoints(p2)
    assert not p1.same_endpoints(p3)
