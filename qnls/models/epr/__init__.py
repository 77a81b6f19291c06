#    Multiverse Quantum Network Simulator: a simulator for comparative
#    evaluation of quantum routing strategies
#    Copyright (C) [2025] Amar Abane
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

from qnls.models.epr.pair import ALLOWED_STATE_TRANSITIONS, EntangledPair, PairState, ResourceInvariantViolation
from qnls.models.epr.werner import W_MAX, W_MIN, decay_fidelity, fidelity_from_w, fidelity_to_w

__all__ = [
    "ALLOWED_STATE_TRANSITIONS",
    "EntangledPair",
    "PairState",
    "ResourceInvariantViolation",
    "W_MAX",
    "W_MIN",
    "decay_fidelity",
    "fidelity_from_w",
    "fidelity_to_w",
]
