import numpy as np
import pytest

from qnls.models.policy import (
    BbpsswPurification,
    ProductSwapPolicy,
    SymmetricBbpsswPurification,
    WernerSwapPolicy,
    make_purification_policy,
    make_swap_policy,
)

GRID = np.linspace(0.0, 1.0, 21)


@pytest.mark.parametrize("policy", [BbpsswPurification(), SymmetricBbpsswPurification()])
def test_purification_bounds(policy):
    for f1 in GRID:
        for f2 in GRID:
            p, f = policy.distill(f1, f2)
            assert 0.0 <= p <= 1.0 + 1e-12
            assert 0.0 <= f <= 1.0
            if policy.improves(f1, f2):
                assert f > max(f1, f2)


def test_bbpssw_values():
    policy = BbpsswPurification()
    p, f = policy.distill(0.9, 0.9)
    assert p == pytest.approx(0.81 + 2 * 0.9 * (0.1 / 3) + 5 * (0.1 / 3) ** 2)
    assert f == pytest.approx((0.81 + (0.1 / 3) ** 2) / p)
    assert f > 0.9

    # equal inputs agree with the symmetric variant
    assert SymmetricBbpsswPurification().distill(0.8, 0.8) == pytest.approx(policy.distill(0.8, 0.8))

    assert policy.distill(1.0, 1.0) == pytest.approx((1.0, 1.0))
    assert policy.improves(0.9, 0.9)
    assert not policy.improves(0.4, 0.4)
    assert not policy.improves(1.0, 1.0)
    # a much weaker sacrifice cannot lift a good pair
    assert not policy.improves(0.95, 0.6)


def test_symmetric_is_lower_bound():
    full, sym = BbpsswPurification(), SymmetricBbpsswPurification()
    for f1, f2 in [(0.9, 0.8), (0.95, 0.7), (0.7, 0.99)]:
        assert sym.distill(f1, f2)[1] <= full.distill(f1, f2)[1] + 1e-12


@pytest.mark.parametrize("policy", [WernerSwapPolicy(), ProductSwapPolicy()])
def test_swap_degrades(policy):
    for f1 in GRID:
        for f2 in GRID:
            f = policy.compose(f1, f2)
            assert 0.0 <= f <= min(f1, f2)


def test_swap_values():
    assert WernerSwapPolicy().compose(1.0, 0.9) == pytest.approx(0.9)
    assert WernerSwapPolicy().compose(0.9, 0.9) == pytest.approx((3 * (2.6 / 3) ** 2 + 1) / 4)
    assert ProductSwapPolicy().compose(0.9, 0.8) == pytest.approx(0.72)


def test_policy_registry():
    assert isinstance(make_purification_policy("bbpssw"), BbpsswPurification)
    assert isinstance(make_purification_policy("bbpssw-symmetric"), SymmetricBbpsswPurification)
    assert isinstance(make_swap_policy("werner"), WernerSwapPolicy)
    assert isinstance(make_swap_policy("product"), ProductSwapPolicy)
    with pytest.raises(KeyError):
        make_swap_policy("teleport")
