class TimeAverage:
    """
    Time-weighted average of a piecewise-constant quantity, e.g. memory occupancy or queue length.

    Times are integer time slots; the value holds from one update until the next.
    """

    def __init__(self, t: int = 0, value: float = 0.0):
        self._t_start = t
        self._t_last = t
        self._value = value
        self._area = 0.0

    @property
    def value(self) -> float:
        """Current value."""
        return self._value

    def update(self, t: int, value: float) -> None:
        """
        Record that the quantity changes to `value` at time slot `t`.
        """
        assert t >= self._t_last
        self._area += self._value * (t - self._t_last)
        self._t_last = t
        self._value = value

    def reset(self, t: int) -> None:
        """
        Discard history before time slot `t`, keeping the current value.
        """
        self.update(t, self._value)
        self._area = 0.0
        self._t_start = t

    def mean(self, t: int) -> float:
        """
        Average from the start (or last reset) until time slot `t`.
        The current value is returned when no time has elapsed.
        """
        self.update(t, self._value)
        elapsed = t - self._t_start
        if elapsed <= 0:
            return self._value
        return self._area / elapsed
