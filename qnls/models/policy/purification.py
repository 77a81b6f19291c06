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

from abc import ABC, abstractmethod

from typing_extensions import override


class PurificationPolicy(ABC):
    """
    Bilateral distillation formula.

    Given the fidelities of two Werner pairs between the same two nodes, a policy returns the
    probability that distillation succeeds and the fidelity of the surviving pair on success.
    """

    name: str

    @abstractmethod
    def distill(self, f1: float, f2: float) -> tuple[float, float]:
        """
        Args:
            f1: fidelity of the kept pair.
            f2: fidelity of the sacrificed pair.

        Returns:
            (success probability, output fidelity on success).
        """
        pass

    def improves(self, f1: float, f2: float) -> bool:
        """
        Whether a successful distillation would yield fidelity strictly above both inputs.
        """
        p, f = self.distill(f1, f2)
        return p > 0.0 and f > max(f1, f2)


class BbpsswPurification(PurificationPolicy):
    """
    BBPSSW recurrence applied to two Werner pairs of possibly different fidelities.
    """

    name = "bbpssw"

    @override
    def distill(self, f1: float, f2: float) -> tuple[float, float]:
        # e is the weight of each of the three other Bell states
        e1, e2 = (1 - f1) / 3, (1 - f2) / 3
        p = f1 * f2 + f1 * e2 + e1 * f2 + 5 * e1 * e2
        if p <= 0.0:
            return 0.0, 0.0
        f = (f1 * f2 + e1 * e2) / p
        return p, min(f, 1.0)


class SymmetricBbpsswPurification(PurificationPolicy):
    """
    BBPSSW recurrence evaluated at the lower input fidelity, a lower bound on the true outcome.
    """

    name = "bbpssw-symmetric"

    @override
    def distill(self, f1: float, f2: float) -> tuple[float, float]:
        fmin = min(f1, f2)
        p = fmin**2 + 5 / 9 * (1 - fmin) ** 2 + 2 / 3 * fmin * (1 - fmin)
        if p <= 0.0:
            return 0.0, 0.0
        return p, min((fmin**2 + (1 - fmin) ** 2 / 9) / p, 1.0)


PURIFICATION_POLICIES: dict[str, type[PurificationPolicy]] = {
    BbpsswPurification.name: BbpsswPurification,
    SymmetricBbpsswPurification.name: SymmetricBbpsswPurification,
}


def make_purification_policy(name: str) -> PurificationPolicy:
    """
    Construct a purification policy by name.

    Raises:
        KeyError - unknown policy name.
    """
    return PURIFICATION_POLICIES[name]()
