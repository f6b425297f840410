"""
Per-device method dispatch.

`create_path_builder(attr)` returns a registrar. Registering an implementation
for `(cls, method, state)` replaces `cls.method` with a wrapper that reads
`getattr(self, attr)` on every call and forwards to the implementation
registered for that value. `ComputeDevice` keys its tensor factories on
`DeviceType` this way, so adding a backend means registering functions in a
new module rather than editing every allocation routine.

Implementations are called like ordinary methods (`self` first). Each
builder owns its registry; separate builders never see each other's paths.
A call whose state has no registered path raises the registration's trap
exception when one was given, `NotImplementedError` otherwise.
"""

from collections import namedtuple
from functools import wraps
from typing import Any, Callable, Dict, Hashable, Optional, Type

from typing_extensions import ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

MethodKey = namedtuple("MethodKey", ["ClassName", "MethodName", "StateVal"])
"""Key identifying a control path: (owning class, method name, state value)."""

TrapFactory = Callable[[Callable[..., Any], Any], BaseException]
"""Builds the exception raised when no control path matches."""


def create_path_builder(state_attr: str = "_state"):
    """
    Create a "path builder" used to register stateful control paths.

    The returned function is used like this:

        device_path = create_path_builder("kind")

        class MyDevice:
            kind = DeviceType.CPU

            def alloc(self, n: int): ...

        @device_path(MyDevice, MyDevice.alloc, DeviceType.CPU)
        def alloc_cpu(self, n: int):
            ...

    Calling `MyDevice().alloc(3)` then dispatches to `alloc_cpu` because
    `self.kind == DeviceType.CPU`.

    Parameters
    ----------
    state_attr : str, optional
        Name of the attribute read from `self` to select a control path.

    Returns
    -------
    Callable
        A function with signature

            (cls, method, state, trap_exception=None) -> decorator

        where `decorator(sub_method)` registers `sub_method` for that
        control path and installs the dispatcher on `cls`.
    """
    methods_map: Dict[MethodKey, Callable[..., Any]] = {}

    def templator(
        cls: Type,
        method: Callable[P, R],
        state: Hashable,
        trap_exception: Optional[TrapFactory] = None,
    ) -> Callable[[Callable[P, R]], Callable[P, R]]:
        """
        Build a decorator that registers a control path implementation.

        Parameters
        ----------
        cls : Type
            The class whose method is wrapped for state-based dispatch.
        method : Callable[P, R]
            The base method being templated. Its metadata is copied onto the
            installed wrapper via `functools.wraps(method)`.
        state : Hashable
            State value selecting the decorated implementation.
        trap_exception : Optional[TrapFactory]
            Called as `trap_exception(method, self)` when no implementation
            matches the current state; the returned exception is raised.
            Defaults to raising `NotImplementedError`.

        Raises
        ------
        TypeError
            If `state` is not hashable.
        """
        try:
            hash(state)
        except TypeError:
            raise TypeError(f"The argument for 'state' must be hashable. Got {state!r}")

        smk = MethodKey(cls.__name__, method.__name__, state)

        def decorator(sub_method: Callable[P, R]) -> Callable[P, R]:
            methods_map[smk] = sub_method

            @wraps(method)
            def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                if not hasattr(self, state_attr):
                    raise NotImplementedError(
                        f"{type(self)} is missing attribute {state_attr!r}"
                    )
                cur = MethodKey(cls.__name__, method.__name__, getattr(self, state_attr))
                if sm := methods_map.get(cur):
                    return sm(self, *args, **kwargs)
                if trap_exception is None:
                    raise NotImplementedError(
                        f"Missing control path (state={cur.StateVal!r}) for {method!r}"
                    )
                raise trap_exception(method, self)

            setattr(cls, method.__name__, wrapper)
            return sub_method

        return decorator

    return templator
