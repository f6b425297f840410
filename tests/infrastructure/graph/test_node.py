import unittest

import numpy as np

from lazygraph.domain._errors import ShapeError
from lazygraph.domain._shape import Shape
from lazygraph.infrastructure import operators as F
from lazygraph.infrastructure.devices import ComputeDevice
from lazygraph.infrastructure.graph import Graph, Node


class TestNodeAccessors(unittest.TestCase):

    def setUp(self) -> None:
        self.g = Graph()
        self.dev = ComputeDevice("cpu")
        self.x = F.input([1, 2, 3, 4], Shape([2, 2]), self.dev, graph=self.g)

    def test_identity(self) -> None:
        self.assertIsInstance(self.x, Node)
        self.assertIs(self.x.graph, self.g)
        self.assertEqual(self.x.generation, 0)
        self.assertEqual(repr(self.x), "Node(fid=0, vid=0, generation=0)")

    def test_shape_and_device(self) -> None:
        self.assertEqual(self.x.shape(), Shape([2, 2]))
        self.assertIs(self.x.device(), self.dev)

    def test_conversions(self) -> None:
        self.assertEqual(self.x.to_list(), [1.0, 2.0, 3.0, 4.0])
        np.testing.assert_array_equal(
            self.x.to_numpy(), np.array([[[1, 2], [3, 4]]], dtype=np.float32)
        )
        self.assertEqual(F.sum(self.x).to_float(), 10.0)
        with self.assertRaises(ShapeError):
            self.x.to_float()


class TestNodeOperators(unittest.TestCase):

    def setUp(self) -> None:
        self.g = Graph()
        self.dev = ComputeDevice("cpu")
        self.a = F.input([1, 2], device=self.dev, graph=self.g)
        self.b = F.input([10, 20], device=self.dev, graph=self.g)

    def test_binary_node_operators(self) -> None:
        self.assertEqual((self.a + self.b).to_list(), [11.0, 22.0])
        self.assertEqual((self.b - self.a).to_list(), [9.0, 18.0])
        self.assertEqual((self.a * self.b).to_list(), [10.0, 40.0])

    def test_scalar_operators(self) -> None:
        self.assertEqual((self.a + 1).to_list(), [2.0, 3.0])
        self.assertEqual((1 + self.a).to_list(), [2.0, 3.0])
        self.assertEqual((self.a - 1).to_list(), [0.0, 1.0])
        self.assertEqual((self.a * 3).to_list(), [3.0, 6.0])
        self.assertEqual((3 * self.a).to_list(), [3.0, 6.0])
        self.assertEqual((-self.a).to_list(), [-1.0, -2.0])
        self.assertEqual((1.0 - self.a).to_list(), [0.0, -1.0])
        self.assertEqual((5 - self.b).to_list(), [-5.0, -15.0])

    def test_operators_record_named_steps(self) -> None:
        y = -(self.a * 2.0 + 1.0)
        self.assertEqual(self.g.operation_of(y).name(), "Negate")
        names = [f.operation.name() for f in self.g._funcs]
        self.assertEqual(names, ["Input", "Input", "Scale(2)", "AddConst(1)", "Negate"])

    def test_reverse_subtract_gradient(self) -> None:
        F.sum(2.0 - self.a).backward()
        self.assertEqual(self.g.gradient_of(self.a).to_list(), [-1.0, -1.0])

    def test_matmul_operator(self) -> None:
        w = F.input([1, 2, 3, 4], Shape([2, 2]), self.dev, graph=self.g)
        self.assertEqual((w @ self.a).to_list(), [5.0, 11.0])

    def test_backward_through_operators(self) -> None:
        y = F.sum(self.a * self.b - self.a)
        y.backward()
        self.assertEqual(self.g.gradient_of(self.a).to_list(), [9.0, 19.0])
        self.assertEqual(self.g.gradient_of(self.b).to_list(), [1.0, 2.0])


if __name__ == "__main__":
    unittest.main()
