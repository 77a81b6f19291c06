#    SimQN: a discrete-event simulator for the quantum networks
#    Copyright (C) 2021-2022 Lutong Chen, Jian Li, Kaiping Xue
#    University of Science and Technology of China, USTC.
#
#    This program is free software: you can redistribute it and/or modify
#    it under the terms of the GNU General Public License as published by
#    the Free Software Foundation, either version 3 of the License, or
#    (at your option) any later version.
#
#    This program is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#    GNU General Public License for more details.
#
#    You should have received a copy of the GNU General Public License
#    along with this program.  If not, see <https://www.gnu.org/licenses/>.

import numpy as np


def fidelity_from_w(w: float) -> float:
    """Convert Werner parameter to fidelity."""
    return (w * 3 + 1) / 4


def fidelity_to_w(f: float) -> float:
    """Convert fidelity to Werner parameter."""
    return (f * 4 - 1) / 3


W_MIN = fidelity_to_w(0.0)
W_MAX = fidelity_to_w(1.0)


def decay_fidelity(f: float, rate: float, t: float) -> float:
    """
    Apply memory storage decay to a Werner state::

        w = w * e^{-rate * t}

    Args:
        f: fidelity before storage.
        rate: decay rate in 1/s, summed over both memories holding the pair.
        t: storage duration in seconds.

    Returns:
        Fidelity after storage, never above the input fidelity.
    """
    if rate <= 0.0 or t <= 0.0:
        return f
    return min(f, fidelity_from_w(fidelity_to_w(f) * float(np.exp(-rate * t))))
