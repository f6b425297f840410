import unittest

import numpy as np

from lazygraph.domain._errors import DeviceMismatchError
from lazygraph.domain._shape import Shape
from lazygraph.infrastructure import operators as F
from lazygraph.infrastructure._parameter import Parameter
from lazygraph.infrastructure.devices import ComputeDevice
from lazygraph.infrastructure.graph import Graph, default_graph


class TestTwoDeviceNetwork(unittest.TestCase):
    """
    Two-layer network split over two devices:

        h = relu(w1 @ x + b1)     on dev0
        y = w2 @ copy(h) + b2     on dev1
    """

    def setUp(self) -> None:
        self.dev0 = ComputeDevice("cpu:0")
        self.dev1 = ComputeDevice("cpu:1")
        self.w1 = Parameter("w1", Shape([2, 2]), self.dev0, [1, -1, 0.5, 2])
        self.b1 = Parameter("b1", Shape([2]), self.dev0, [0, -1])
        self.w2 = Parameter("w2", Shape([1, 2]), self.dev1, [2, 3])
        self.b2 = Parameter("b2", Shape([1]), self.dev1, 0.5)
        self.g = Graph()

    def build(self):
        with default_graph(self.g):
            x = F.input([1, 2], device=self.dev0)
            w1 = F.parameter(self.w1)
            b1 = F.parameter(self.b1)
            w2 = F.parameter(self.w2)
            b2 = F.parameter(self.b2)
        h = F.relu(w1 @ x + b1)
        y = w2 @ F.copy(h, self.dev1) + b2
        return h, y

    def test_forward_value_and_devices(self) -> None:
        h, y = self.build()
        self.assertEqual(h.to_list(), [0.0, 3.5])
        self.assertIs(h.device(), self.dev0)
        self.assertIs(y.device(), self.dev1)
        self.assertEqual(y.shape(), Shape())
        self.assertAlmostEqual(y.to_float(), 11.0, places=5)

    def test_gradients_cross_devices(self) -> None:
        _, y = self.build()
        y.backward()
        np.testing.assert_allclose(self.w2.gradient.to_list(), [0.0, 3.5])
        np.testing.assert_allclose(self.b2.gradient.to_list(), [1.0])
        np.testing.assert_allclose(self.b1.gradient.to_list(), [0.0, 3.0])
        np.testing.assert_allclose(self.w1.gradient.to_list(), [0.0, 0.0, 3.0, 6.0])
        self.assertIs(self.w1.gradient.device, self.dev0)
        self.assertIs(self.w2.gradient.device, self.dev1)

    def test_mixing_devices_without_copy_fails(self) -> None:
        h, _ = self.build()
        before = self.g.num_operations()
        w2 = F.parameter(self.w2, graph=self.g)
        with self.assertRaises(DeviceMismatchError):
            w2 @ h
        self.assertEqual(self.g.num_operations(), before + 1)


if __name__ == "__main__":
    unittest.main()
