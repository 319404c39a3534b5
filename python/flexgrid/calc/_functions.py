"""Builtin function table for formula evaluation.

Every builtin takes a list of already-resolved float arguments and returns a
float. Numeric problems are reported as values, never as exceptions: NaN for
domain errors and wrong arity, infinities for overflow, and the ``BLANK``
sentinel for "display nothing".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

# Reserved value meaning "render nothing"; distinct from NaN/Infinity errors.
BLANK = float("-inf")

NAN = float("nan")


def is_blank(value: float) -> bool:
    """Return True if *value* is the ``BLANK()`` sentinel."""
    return value == BLANK


def is_error_value(value: float) -> bool:
    """Return True for values a presentation layer shows as an error marker.

    NaN and +Infinity are errors; -Infinity is reserved for ``BLANK``.
    """
    return math.isnan(value) or value == math.inf


# ---------------------------------------------------------------------------
# IEEE-style arithmetic helpers (Python raises where floats would not)
# ---------------------------------------------------------------------------


def safe_divide(a: float, b: float) -> float:
    """Float division with IEEE results for a zero divisor."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return NAN
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def safe_power(a: float, b: float) -> float:
    """``a ** b`` returning NaN for complex results and inf on overflow."""
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        # Negative base with fractional exponent, or 0 raised to a negative power.
        if a == 0 and b < 0:
            return math.inf
        return NAN


# ---------------------------------------------------------------------------
# Builtin implementations
# ---------------------------------------------------------------------------


def _builtin_sum(args: list[float]) -> float:
    return float(sum(args))


def _builtin_average(args: list[float]) -> float:
    if not args:
        return 0.0
    return _builtin_sum(args) / len(args)


def _any_nan(args: list[float]) -> bool:
    return any(math.isnan(a) for a in args)


# max/min silently drop NaN depending on argument order.
def _builtin_max(args: list[float]) -> float:
    if _any_nan(args):
        return NAN
    return max(args)


def _builtin_min(args: list[float]) -> float:
    if _any_nan(args):
        return NAN
    return min(args)


def _builtin_abs(args: list[float]) -> float:
    return abs(args[0])


def _builtin_sqrt(args: list[float]) -> float:
    if args[0] < 0:
        return NAN
    return math.sqrt(args[0])


def _builtin_round(args: list[float]) -> float:
    value = args[0]
    if not math.isfinite(value):
        return value
    digits = args[1] if len(args) > 1 else 0.0
    if not math.isfinite(digits):
        return NAN
    digits = int(digits)
    return float(round(value, digits))


def _builtin_floor(args: list[float]) -> float:
    if not math.isfinite(args[0]):
        return args[0]
    return float(math.floor(args[0]))


def _builtin_ceiling(args: list[float]) -> float:
    if not math.isfinite(args[0]):
        return args[0]
    return float(math.ceil(args[0]))


def _builtin_if(args: list[float]) -> float:
    false_value = args[2] if len(args) > 2 else 0.0
    return args[1] if args[0] != 0.0 else false_value


def _builtin_power(args: list[float]) -> float:
    return safe_power(args[0], args[1])


def _builtin_log(args: list[float]) -> float:
    value = args[0]
    base = args[1] if len(args) > 1 else 10.0
    if value == 0 and base > 1:
        return -math.inf
    try:
        if base == 10.0:
            return math.log10(value)
        return math.log(value, base)
    except (ValueError, ZeroDivisionError):
        return NAN


def _builtin_ln(args: list[float]) -> float:
    value = args[0]
    if value == 0:
        return -math.inf
    try:
        return math.log(value)
    except ValueError:
        return NAN


def _builtin_exp(args: list[float]) -> float:
    try:
        return math.exp(args[0])
    except OverflowError:
        return math.inf


def _builtin_blank(args: list[float]) -> float:
    return BLANK


# ---------------------------------------------------------------------------
# Financial builtins (PMT, FV, PV)
# ---------------------------------------------------------------------------


def _builtin_pmt(args: list[float]) -> float:
    """PMT(rate, nper, pv): payment for a loan with constant payments."""
    rate, nper, pv = args[0], args[1], args[2]
    if rate == 0:
        return safe_divide(-pv, nper)
    pvif = safe_power(1 + rate, nper)
    return safe_divide(-pv * rate * pvif, pvif - 1)


def _builtin_fv(args: list[float]) -> float:
    """FV(rate, nper, pmt, [pv]): future value of periodic payments."""
    rate, nper, pmt = args[0], args[1], args[2]
    pv = args[3] if len(args) > 3 else 0.0
    if rate == 0:
        return -(pv + pmt * nper)
    factor = safe_power(1 + rate, nper)
    return -(pv * factor + safe_divide(pmt * (factor - 1), rate))


def _builtin_pv(args: list[float]) -> float:
    """PV(rate, nper, pmt): present value of a series of payments."""
    rate, nper, pmt = args[0], args[1], args[2]
    if rate == 0:
        return -pmt * nper
    return safe_divide(-pmt * (1 - safe_power(1 + rate, -nper)), rate)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FunctionSpec:
    """A builtin with its arity contract; ``max_args=None`` means variadic."""

    name: str
    func: Callable[[list[float]], float]
    min_args: int = 0
    max_args: int | None = None

    def accepts(self, n_args: int) -> bool:
        if n_args < self.min_args:
            return False
        return self.max_args is None or n_args <= self.max_args

    def __call__(self, args: list[float]) -> float:
        if not self.accepts(len(args)):
            logger.debug("%s called with %d arguments", self.name, len(args))
            return NAN
        return self.func(args)


_BUILTINS: dict[str, FunctionSpec] = {
    spec.name: spec
    for spec in (
        FunctionSpec("SUM", _builtin_sum),
        FunctionSpec("AVERAGE", _builtin_average),
        FunctionSpec("AVG", _builtin_average),
        FunctionSpec("MAX", _builtin_max, 1),
        FunctionSpec("MIN", _builtin_min, 1),
        FunctionSpec("ABS", _builtin_abs, 1, 1),
        FunctionSpec("SQRT", _builtin_sqrt, 1, 1),
        FunctionSpec("ROUND", _builtin_round, 1, 2),
        FunctionSpec("FLOOR", _builtin_floor, 1, 1),
        FunctionSpec("CEILING", _builtin_ceiling, 1, 1),
        FunctionSpec("CEIL", _builtin_ceiling, 1, 1),
        FunctionSpec("IF", _builtin_if, 2, 3),
        FunctionSpec("POWER", _builtin_power, 2, 2),
        FunctionSpec("POW", _builtin_power, 2, 2),
        FunctionSpec("LOG", _builtin_log, 1, 2),
        FunctionSpec("LN", _builtin_ln, 1, 1),
        FunctionSpec("EXP", _builtin_exp, 1, 1),
        FunctionSpec("PMT", _builtin_pmt, 3, 3),
        FunctionSpec("FV", _builtin_fv, 3, 4),
        FunctionSpec("PV", _builtin_pv, 3, 3),
        FunctionSpec("BLANK", _builtin_blank, 0, 0),
    )
}


class FunctionRegistry:
    """Registry of callable function implementations.

    Starts with builtins and can be extended with custom functions.
    """

    def __init__(self) -> None:
        self._functions: dict[str, FunctionSpec] = dict(_BUILTINS)

    def register(
        self,
        name: str,
        func: Callable[[list[float]], float],
        min_args: int = 0,
        max_args: int | None = None,
    ) -> None:
        key = name.upper()
        self._functions[key] = FunctionSpec(key, func, min_args, max_args)

    def get(self, name: str) -> FunctionSpec | None:
        return self._functions.get(name.upper())

    def has(self, name: str) -> bool:
        return name.upper() in self._functions

    @property
    def supported_functions(self) -> frozenset[str]:
        return frozenset(self._functions.keys())


def is_supported(func_name: str) -> bool:
    """Check if a function name is one of the builtins."""
    return func_name.upper() in _BUILTINS
