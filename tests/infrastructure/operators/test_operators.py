import unittest

import numpy as np

from lazygraph.domain._errors import (
    DeviceMismatchError,
    DeviceNotSupportedError,
    GraphMismatchError,
    ShapeError,
)
from lazygraph.domain._shape import Shape
from lazygraph.infrastructure import operators as F
from lazygraph.infrastructure.devices import ComputeDevice
from lazygraph.infrastructure.graph import Graph


class OperatorTestCase(unittest.TestCase):

    def setUp(self) -> None:
        self.g = Graph()
        self.dev = ComputeDevice("cpu")

    def inp(self, values, shape=None):
        return F.input(values, shape, self.dev, graph=self.g)

    def grad(self, node):
        return self.g.gradient_of(node).to_list()


class TestMatMul(OperatorTestCase):

    def test_matrix_vector(self) -> None:
        w = self.inp([1, 2, 3, 4], Shape([2, 2]))
        x = self.inp([1, 1])
        y = F.matmul(w, x)
        self.assertEqual(y.shape(), Shape([2]))
        self.assertEqual(y.to_list(), [3.0, 7.0])

        s = F.sum(y)
        self.assertEqual(s.to_float(), 10.0)
        s.backward()
        self.assertEqual(self.grad(w), [1.0, 1.0, 1.0, 1.0])
        self.assertEqual(self.grad(x), [4.0, 6.0])

    def test_shape_rules(self) -> None:
        a = self.inp([1] * 6, Shape([2, 3]))
        b = self.inp([1] * 6, Shape([3, 2]))
        self.assertEqual(F.matmul(a, b).shape(), Shape([2, 2]))
        with self.assertRaises(ShapeError):
            F.matmul(a, a)
        c = self.inp([1] * 8, Shape([2, 2, 2]))
        with self.assertRaises(ShapeError):
            F.matmul(c, c)

    def test_batched_weights_broadcast(self) -> None:
        w = self.inp([1, 0, 0, 1], Shape([2, 2]))
        x = self.inp([1, 2, 3, 4], Shape([2], 2))
        y = F.matmul(w, x)
        self.assertEqual(y.shape(), Shape([2], 2))
        self.assertEqual(y.to_list(), [1.0, 2.0, 3.0, 4.0])
        F.sum(F.batch_sum(y)).backward()
        self.assertEqual(self.grad(w), [4.0, 6.0, 4.0, 6.0])


class TestElementwise(OperatorTestCase):

    def test_batch_broadcast_add(self) -> None:
        a = self.inp([1, 2])
        b = self.inp([10, 20, 30, 40], Shape([2], 2))
        y = F.add(a, b)
        self.assertEqual(y.shape(), Shape([2], 2))
        self.assertEqual(y.to_list(), [11.0, 22.0, 31.0, 42.0])

        s = F.sum(y)
        self.assertEqual(s.shape(), Shape([], 2))
        self.assertEqual(s.to_list(), [33.0, 73.0])

        s.backward()
        self.assertEqual(self.grad(a), [2.0, 2.0])
        self.assertEqual(self.grad(b), [1.0, 1.0, 1.0, 1.0])

    def test_incompatible_batches_raise(self) -> None:
        a = self.inp([1, 2, 3, 4], Shape([2], 2))
        b = self.inp([1, 2, 3, 4, 5, 6], Shape([2], 3))
        with self.assertRaises(ShapeError) as ctx:
            F.add(a, b)
        self.assertIn("Add", str(ctx.exception))

    def test_subtract(self) -> None:
        a = self.inp([5, 7])
        b = self.inp([1, 2])
        y = F.subtract(a, b)
        self.assertEqual(y.to_list(), [4.0, 5.0])
        F.sum(y).backward()
        self.assertEqual(self.grad(a), [1.0, 1.0])
        self.assertEqual(self.grad(b), [-1.0, -1.0])

    def test_multiply_with_batch_broadcast(self) -> None:
        a = self.inp([2, 3])
        b = self.inp([1, 2, 3, 4], Shape([2], 2))
        y = F.multiply(a, b)
        self.assertEqual(y.to_list(), [2.0, 6.0, 6.0, 12.0])
        F.sum(F.batch_sum(y)).backward()
        self.assertEqual(self.grad(a), [4.0, 6.0])
        self.assertEqual(self.grad(b), [2.0, 3.0, 2.0, 3.0])

    def test_scale_add_const_negate(self) -> None:
        x = self.inp([1, -2])
        y = F.negate(F.add_const(F.scale(x, 3.0), 1.0))
        self.assertEqual(y.to_list(), [-4.0, 5.0])
        F.sum(y).backward()
        self.assertEqual(self.grad(x), [-3.0, -3.0])

    def test_device_mismatch_is_rejected(self) -> None:
        a = self.inp([1])
        b = F.input([1], device=ComputeDevice("cpu:1"), graph=self.g)
        for builder in (F.add, F.subtract, F.multiply, F.matmul):
            with self.subTest(builder=builder.__name__):
                with self.assertRaises(DeviceMismatchError):
                    builder(a, b)
        self.assertEqual(self.g.num_operations(), 2)

    def test_foreign_graph_is_reported_before_device(self) -> None:
        other = Graph()
        a = self.inp([1])
        b = F.input([1], device=ComputeDevice("cpu:1"), graph=other)
        for builder in (F.add, F.subtract, F.multiply, F.matmul):
            with self.subTest(builder=builder.__name__):
                with self.assertRaises(GraphMismatchError):
                    builder(a, b)
        with self.assertRaises(GraphMismatchError):
            a + b
        with self.assertRaises(GraphMismatchError):
            F.scale(b, 2.0, graph=self.g)
        self.assertEqual(self.g.num_operations(), 1)
        self.assertEqual(other.num_operations(), 1)


class TestReductions(OperatorTestCase):

    def test_relu(self) -> None:
        x = self.inp([-1, 0, 2])
        y = F.relu(x)
        self.assertEqual(y.to_list(), [0.0, 0.0, 2.0])
        F.sum(y).backward()
        self.assertEqual(self.grad(x), [0.0, 0.0, 1.0])

    def test_sum_is_per_batch_item(self) -> None:
        x = self.inp(list(range(12)), Shape([2, 3], 2))
        s = F.sum(x)
        self.assertEqual(s.shape(), Shape([], 2))
        self.assertEqual(s.to_list(), [15.0, 51.0])
        s.backward()
        self.assertEqual(self.grad(x), [1.0] * 12)

    def test_batch_sum(self) -> None:
        x = self.inp([1, 2, 3, 4, 5, 6], Shape([2], 3))
        y = F.batch_sum(x)
        self.assertEqual(y.shape(), Shape([2]))
        self.assertEqual(y.to_list(), [9.0, 12.0])
        F.sum(F.scale(y, 2.0)).backward()
        np.testing.assert_allclose(self.grad(x), [2.0] * 6)


class TestCopy(OperatorTestCase):

    def test_copy_moves_value_and_gradient(self) -> None:
        other = ComputeDevice("cpu:1")
        x = self.inp([1, 2])
        y = F.copy(x, other)
        self.assertIs(y.device(), other)
        self.assertEqual(self.g.operation_of(y).name(), "Copy(cpu:1)")

        value = y.value()
        self.assertIs(value.device, other)
        self.assertEqual(value.to_list(), [1.0, 2.0])

        F.sum(F.scale(y, 3.0)).backward()
        grad = self.g.gradient_of(x)
        self.assertIs(grad.device, self.dev)
        self.assertEqual(grad.to_list(), [3.0, 3.0])

    def test_cuda_copy_is_not_supported(self) -> None:
        x = self.inp([1])
        y = F.copy(x, ComputeDevice("cuda:0"))
        with self.assertRaises(DeviceNotSupportedError):
            y.value()


class TestSources(OperatorTestCase):

    def test_input_checks_value_count(self) -> None:
        with self.assertRaises(ValueError):
            self.inp([1, 2, 3], Shape([2]))
        self.assertEqual(self.g.num_operations(), 0)

    def test_input_defaults(self) -> None:
        x = F.input([1, 2, 3], graph=self.g)
        self.assertEqual(x.shape(), Shape([3]))
        self.assertEqual(x.device(), ComputeDevice("cpu"))

    def test_sources_take_no_arguments(self) -> None:
        x = self.inp([1])
        with self.assertRaises(ShapeError):
            self.g.add_operation(F.Input(Shape([1]), [1.0], self.dev), [x])


if __name__ == "__main__":
    unittest.main()
