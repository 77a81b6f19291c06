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

from qnls.simulator.event import Event, WrapperEvent, func_to_event
from qnls.simulator.pool import CausalityError, DefaultEventPool
from qnls.simulator.simulator import Simulator, SimulatorInstallable
from qnls.simulator.time import DEFAULT_ACCURACY, Time

__all__ = [
    "CausalityError",
    "DEFAULT_ACCURACY",
    "DefaultEventPool",
    "Event",
    "Simulator",
    "SimulatorInstallable",
    "Time",
    "WrapperEvent",
    "func_to_event",
]
