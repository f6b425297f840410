import unittest

from lazygraph.domain.utils._control_path import create_path_builder


class TestCreatePathBuilder(unittest.TestCase):

    def setUp(self) -> None:
        self.decorator = create_path_builder("_state")

    def test_dispatches_by_state_value(self) -> None:
        class C:
            def __init__(self, st):
                self._state = st

            def foo(self, x: int) -> int:
                # base implementation never used once wrapper installed
                return -999

        @self.decorator(C, C.foo, state="A")
        def foo_A(self, x: int) -> int:
            return x + 10

        @self.decorator(C, C.foo, state="B")
        def foo_B(self, x: int) -> int:
            return x + 20

        self.assertEqual(C("A").foo(1), 11)
        self.assertEqual(C("B").foo(1), 21)

    def test_sub_method_receives_self(self) -> None:
        class C:
            def __init__(self, st, offset):
                self._state = st
                self.offset = offset

            def foo(self, x: int) -> int:
                return -999

        @self.decorator(C, C.foo, state="A")
        def foo_A(self, x: int) -> int:
            return x + self.offset

        self.assertEqual(C("A", 5).foo(1), 6)

    def test_custom_state_attribute(self) -> None:
        decorator = create_path_builder("kind")

        class C:
            kind = "cpu"

            def run(self) -> str:
                return "base"

        @decorator(C, C.run, "cpu")
        def run_cpu(self) -> str:
            return "cpu-path"

        self.assertEqual(C().run(), "cpu-path")

    def test_dispatch_supports_none_state(self) -> None:
        class C:
            _state = None

            def foo(self, x: int) -> int:
                return -999

        @self.decorator(C, C.foo, state=None)
        def foo_none(self, x: int) -> int:
            return x * 2

        self.assertEqual(C().foo(3), 6)

    def test_missing_state_attribute_raises_not_implemented(self) -> None:
        class C:
            def foo(self, x: int) -> int:
                return x

        @self.decorator(C, C.foo, state="A")
        def foo_A(self, x: int) -> int:
            return x + 1

        with self.assertRaises(NotImplementedError) as ctx:
            C().foo(1)

        self.assertIn("missing attribute", str(ctx.exception))
        self.assertIn("'_state'", str(ctx.exception))

    def test_missing_control_path_without_trap_raises_not_implemented(self) -> None:
        class C:
            def __init__(self, st):
                self._state = st

            def foo(self, x: int) -> int:
                return x

        @self.decorator(C, C.foo, state="A")
        def foo_A(self, x: int) -> int:
            return x + 1

        with self.assertRaises(NotImplementedError) as ctx:
            C("B").foo(1)

        self.assertIn("Missing control path", str(ctx.exception))
        self.assertIn("state='B'", str(ctx.exception))

    def test_trap_exception_factory_builds_raised_error(self) -> None:
        class MissingPathError(Exception):
            pass

        seen = {}

        def trap(method, obj):
            seen["method"] = method.__name__
            seen["state"] = obj._state
            return MissingPathError("no path")

        class C:
            def __init__(self, st):
                self._state = st

            def foo(self, x: int) -> int:
                return x

        @self.decorator(C, C.foo, state="A", trap_exception=trap)
        def foo_A(self, x: int) -> int:
            return x + 1

        with self.assertRaises(MissingPathError):
            C("B").foo(1)

        self.assertEqual(seen, {"method": "foo", "state": "B"})

    def test_unhashable_state_raises_type_error(self) -> None:
        class C:
            def foo(self):
                return None

        with self.assertRaises(TypeError):
            self.decorator(C, C.foo, state=["not", "hashable"])

    def test_wrapper_preserves_original_method_metadata(self) -> None:
        class C:
            _state = "A"

            def foo(self, x: int) -> int:
                """Original foo docstring."""
                return x

        @self.decorator(C, C.foo, state="A")
        def foo_A(self, x: int) -> int:
            return x

        self.assertEqual(C.foo.__name__, "foo")
        self.assertEqual(C.foo.__doc__, "Original foo docstring.")


if __name__ == "__main__":
    unittest.main()
