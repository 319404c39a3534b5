"""Fine-grained reactive primitives: signals and memoized derivations.

A ``Memo`` records every ``Signal`` or ``Memo`` it reads while computing.
Writing a signal marks all downstream memos dirty; a dirty memo recomputes
on its next read, so a memo recomputes at most once per upstream change no
matter how many times it is read in between.

Evaluation is single-threaded: the tracking stack below is module state.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")

# Memos currently computing, innermost last. ``None`` suspends tracking.
_tracking: list[Memo | None] = []


def _track(source: Signal | Memo) -> None:
    if _tracking and _tracking[-1] is not None:
        observer = _tracking[-1]
        observer._sources.add(source)  # noqa: SLF001
        source._observers.add(observer)  # noqa: SLF001


class Signal(Generic[T]):
    """A writable reactive value. Calling it reads the current value."""

    __slots__ = ("_value", "_observers", "__weakref__")

    def __init__(self, value: T) -> None:
        self._value = value
        self._observers: set[Memo] = set()

    def __call__(self) -> T:
        _track(self)
        return self._value

    def peek(self) -> T:
        """Read the value without registering a dependency."""
        return self._value

    def set(self, value: T) -> None:
        if value is self._value or value == self._value:
            return
        self._value = value
        for observer in list(self._observers):
            observer._invalidate()  # noqa: SLF001

    def __repr__(self) -> str:
        return f"<Signal value={self._value!r} observers={len(self._observers)}>"


class Memo(Generic[T]):
    """A cached derivation of other signals and memos.

    Dependencies are discovered by tracing reads during each computation and
    replaced wholesale on every recompute, so conditional reads are handled.
    """

    __slots__ = (
        "_fn", "_value", "_dirty", "_sources", "_observers",
        "compute_count", "__weakref__",
    )

    def __init__(self, fn: Callable[[], T]) -> None:
        self._fn = fn
        self._value: T | None = None
        self._dirty = True
        self._sources: set[Signal | Memo] = set()
        self._observers: set[Memo] = set()
        self.compute_count = 0

    def __call__(self) -> T:
        _track(self)
        if self._dirty:
            self._recompute()
        return self._value  # type: ignore[return-value]

    @property
    def dirty(self) -> bool:
        return self._dirty

    def _recompute(self) -> None:
        for source in self._sources:
            source._observers.discard(self)  # noqa: SLF001
        self._sources = set()
        _tracking.append(self)
        try:
            self._value = self._fn()
        finally:
            _tracking.pop()
        self._dirty = False
        self.compute_count += 1

    def _invalidate(self) -> None:
        if self._dirty:
            return
        self._dirty = True
        for observer in list(self._observers):
            observer._invalidate()  # noqa: SLF001

    def __repr__(self) -> str:
        state = "dirty" if self._dirty else f"value={self._value!r}"
        return f"<Memo {state} sources={len(self._sources)}>"


def create_signal(initial: T) -> tuple[Callable[[], T], Callable[[T], None]]:
    """Return an ``(accessor, setter)`` pair backed by a new Signal."""
    signal = Signal(initial)
    return signal, signal.set


def create_memo(fn: Callable[[], T]) -> Memo[T]:
    """Wrap *fn* in a read-tracing, lazily recomputed Memo."""
    return Memo(fn)


def untracked(fn: Callable[[], T]) -> T:
    """Call *fn* without recording its reads as dependencies."""
    _tracking.append(None)
    try:
        return fn()
    finally:
        _tracking.pop()
