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

from qnls.models.epr.werner import fidelity_from_w, fidelity_to_w


class SwapPolicy(ABC):
    """
    Fidelity of the pair produced by an entanglement swap.

    The result never exceeds the lower input fidelity.
    """

    name: str

    def compose(self, f1: float, f2: float) -> float:
        return min(self._compose(f1, f2), f1, f2)

    @abstractmethod
    def _compose(self, f1: float, f2: float) -> float:
        pass


class WernerSwapPolicy(SwapPolicy):
    """
    Swapping two Werner states multiplies their Werner parameters.
    """

    name = "werner"

    @override
    def _compose(self, f1: float, f2: float) -> float:
        return fidelity_from_w(fidelity_to_w(f1) * fidelity_to_w(f2))


class ProductSwapPolicy(SwapPolicy):
    """
    Simple multiplicative model: output fidelity is the product of input fidelities.
    """

    name = "product"

    @override
    def _compose(self, f1: float, f2: float) -> float:
        return f1 * f2


SWAP_POLICIES: dict[str, type[SwapPolicy]] = {
    WernerSwapPolicy.name: WernerSwapPolicy,
    ProductSwapPolicy.name: ProductSwapPolicy,
}


def make_swap_policy(name: str) -> SwapPolicy:
    """
    Construct a swap policy by name.

    Raises:
        KeyError - unknown policy name.
    """
    return SWAP_POLICIES[name]()
