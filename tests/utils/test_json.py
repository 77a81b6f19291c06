import json
from enum import Enum, auto

import numpy as np
import pytest

from qnls.utils import json_default, json_encodable


class DataClass:
    def __init__(self):
        self.included_attribute = 1
        self._excluded_attribute = 2

    @property
    def included_property(self) -> int:
        return 3

    @property
    def _excluded_property(self) -> int:
        return 4


@json_encodable
class EncodableClass(DataClass):
    pass


class Color(Enum):
    RED = auto()


def test_json_default():
    with pytest.raises(TypeError):
        json.dumps(EncodableClass())

    with pytest.raises(TypeError):
        json.dumps(DataClass(), default=json_default)

    wire = json.dumps(EncodableClass(), default=json_default, sort_keys=True)
    assert wire == '{"included_attribute": 1, "included_property": 3}'


def test_json_default_scalars():
    wire = json.dumps({"color": Color.RED, "count": np.int64(7), "ratio": np.float64(0.5)}, default=json_default)
    assert json.loads(wire) == {"color": "RED", "count": 7, "ratio": 0.5}
