"""Safe integer wrapper for arithmetic on token amounts.

This module provides SafeInt, a lightweight wrapper that makes arithmetic
operations safe by default:
- Values are unsigned and live in the wide (u128) width
- Addition or multiplication past u128 raises WidthOverflow
- Subtraction underflow raises Underflow
- Division by zero raises DivisionByZero
- Narrowing back to the native u64 width is explicit and checked

Usage pattern:
    from cpamm.safe_int import S

    def calculate(a: int, b: int, c: int) -> int:
        # Wrap at entry
        sa, sb, sc = S(a), S(b), S(c)

        # Natural arithmetic - automatically checked
        result = (sa * sb) // sc  # Raises if sc == 0
        remainder = sa - sb       # Raises if sb > sa

        # Narrow at exit
        return result.to_u64()
"""

from __future__ import annotations

from cpamm.constants import U64_MAX, U128_MAX
from cpamm.errors import DivisionByZero, Underflow, WidthOverflow


class SafeInt:
    """Unsigned integer with checked wide arithmetic.

    Wraps an integer and provides arithmetic operators that raise
    descriptive errors instead of producing unrepresentable results:
    - Results above 2^128-1 raise WidthOverflow
    - Negative results from subtraction raise Underflow
    - Division by zero raises DivisionByZero
    - Values exceeding u64 raise WidthOverflow on to_u64()

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Args:
            value: Integer value to wrap, or SafeInt to copy

        Raises:
            TypeError: If value is not an int or SafeInt
            Underflow: If value is negative
            WidthOverflow: If value exceeds u128
        """
        if isinstance(value, SafeInt):
            self._value = value._value
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"Negative value cannot be unsigned: {value}")
        if value > U128_MAX:
            raise WidthOverflow(f"Value exceeds u128 max: {value}")
        self._value = value

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        """Add two values.

        Raises:
            WidthOverflow: If the sum exceeds u128
        """
        return _wide(self._value + _extract_value(other), "+", self._value, other)

    def __radd__(self, other: int) -> SafeInt:
        return _wide(other + self._value, "+", other, self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        """Multiply two values.

        Raises:
            WidthOverflow: If the product exceeds u128
        """
        return _wide(self._value * _extract_value(other), "*", self._value, other)

    def __rmul__(self, other: int) -> SafeInt:
        return _wide(other * self._value, "*", other, self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division (rounds down).

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __truediv__(self, other: object) -> SafeInt:
        raise TypeError("SafeInt does not support true division; use floor division (//)")

    def __rtruediv__(self, other: object) -> SafeInt:
        raise TypeError("SafeInt does not support true division; use floor division (//)")

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        """True if non-zero."""
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds up).

        Equivalent to: (self + other - 1) // other, without forming the
        intermediate sum (which could leave the wide width).

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        quotient, remainder = divmod(self._value, other_val)
        return SafeInt(quotient + (1 if remainder else 0))

    def to_u64(self) -> int:
        """Narrow to the native amount width.

        Raises:
            WidthOverflow: If value exceeds 2^64-1
        """
        if self._value > U64_MAX:
            raise WidthOverflow(f"Value exceeds u64 max: {self._value}")
        return self._value


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


def _wide(result: int, op: str, left: SafeInt | int, right: SafeInt | int) -> SafeInt:
    """Wrap a sum or product, rejecting results beyond u128."""
    if result > U128_MAX:
        raise WidthOverflow(
            f"Overflow: {_extract_value(left)} {op} {_extract_value(right)} exceeds u128"
        )
    return SafeInt(result)


# Convenience alias for concise code
S = SafeInt
