import time

import pytest

from qnls.utils import WallClockTimeout


@pytest.mark.parametrize(
    ("sleep_for", "occurred"),
    [
        (0.1, False),
        (0.7, True),
    ],
)
def test_timeout(sleep_for: float, occurred: bool):
    stopped = False

    def stop():
        nonlocal stopped
        stopped = True

    timeout = WallClockTimeout(0.4, stop)
    with timeout():
        time.sleep(sleep_for)

    assert timeout.occurred is occurred
    assert stopped is occurred


def test_no_timeout():
    def stop():
        raise AssertionError("stop must not be called")

    timeout = WallClockTimeout(None, stop)
    with timeout():
        time.sleep(0.05)
    assert timeout.occurred is False
