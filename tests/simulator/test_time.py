import pytest

from qnls.simulator import Time


def test_time_arithmetic():
    t1 = Time.from_sec(1.5, accuracy=1000)
    assert t1.time_slot == 1500
    assert t1.sec == pytest.approx(1.5)

    t2 = t1 + 0.25
    assert t2.time_slot == 1750
    assert (t2 - t1).time_slot == 250
    assert (t2 - t1).sec == pytest.approx(0.25)
    assert t1 + Time(10, accuracy=1000) == Time(1510, accuracy=1000)


def test_time_compare():
    t1 = Time(100)
    t2 = Time(200)
    assert t1 < t2
    assert t1 <= t2
    assert t2 > t1
    assert t2 >= t1
    assert t1 == Time(100)
    assert t1 != t2
    assert t1 != 100
    assert hash(t1) == hash(Time(100))


def test_time_rounding():
    assert Time.from_sec(0.0000000014).time_slot == 1
    assert Time.from_sec(0.0000000016).time_slot == 2
    assert Time.from_sec(3, accuracy=10).time_slot == 30
