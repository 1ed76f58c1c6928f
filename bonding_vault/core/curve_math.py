"""Pure integer arithmetic shared by the pricing curves.

Every function is stateless and operates on plain Python ints. Rounding is
explicit: `//` floors, `ceil_div` rounds up, and the fixed-point `log2_fixed`
truncates at every step so that its result is monotone non-decreasing in the
input ratio.
"""

from __future__ import annotations

MAX_UINT256: int = (1 << 256) - 1

# Fixed-point log2 precision. Callers scale precision with operand size so the
# absolute rounding loss of a conversion stays below one asset unit.
LOG2_MIN_PRECISION_BITS: int = 128
LOG2_GUARD_BITS: int = 80
# Bound on |log2_fixed(n, d) - log2(n/d) * 2**P| in units of 2**-P.
LOG2_ERROR_ULPS: int = 64


def require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_non_negative(name: str, value: int) -> None:
    require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


def check_curve_state(total_shares: int, total_assets: int) -> None:
    """A priced vault (shares outstanding) must hold a positive reserve."""
    require_non_negative("total_shares", total_shares)
    require_non_negative("total_assets", total_assets)
    if total_shares > 0 and total_assets == 0:
        raise ValueError("total_assets must be positive while shares are outstanding")


def ceil_div(a: int, b: int) -> int:
    if b <= 0:
        raise ValueError("b must be positive")
    if a < 0:
        raise ValueError("a must be non-negative")
    return (a + b - 1) // b


def icbrt(n: int) -> int:
    """Floor cube root of a non-negative int (exact for arbitrary precision)."""
    require_non_negative("n", n)
    if n < 2:
        return n

    # Start above the root; Newton's floor iteration then decreases monotonically
    # until it reaches floor(cbrt(n)).
    x = 1 << ((n.bit_length() + 2) // 3)
    while True:
        y = (2 * x + n // (x * x)) // 3
        if y >= x:
            break
        x = y

    if not (x * x * x <= n < (x + 1) * (x + 1) * (x + 1)):
        raise AssertionError("internal error: icbrt did not converge")
    return x


def log2_precision_bits(magnitude: int) -> int:
    """Fixed-point precision needed so a relative log error cannot move `magnitude` by a unit."""
    require_non_negative("magnitude", magnitude)
    return max(LOG2_MIN_PRECISION_BITS, magnitude.bit_length() + LOG2_GUARD_BITS)


def log2_fixed(num: int, den: int, precision_bits: int = LOG2_MIN_PRECISION_BITS) -> int:
    """
    Fixed-point `log2(num / den) * 2**precision_bits` for `num >= den > 0`.

    Digit-by-digit algorithm:
    - integer part from bit lengths,
    - mantissa y in [1, 2) scaled by 2**P,
    - each fractional bit by squaring y and halving when it reaches 2.

    Every step is a floor, so the result never exceeds the true value by more
    than rounding and is monotone non-decreasing in `num / den`.
    """
    require_int("num", num)
    require_int("den", den)
    require_int("precision_bits", precision_bits)
    if den <= 0:
        raise ValueError("den must be positive")
    if num < den:
        raise ValueError("log2_fixed requires num >= den")
    if precision_bits <= 0:
        raise ValueError("precision_bits must be positive")

    p = precision_bits
    k = num.bit_length() - den.bit_length()
    if (den << k) > num:
        k -= 1

    y = (num << p) // (den << k)
    two = 2 << p
    result = k << p
    bit = 1 << (p - 1)
    while bit:
        y = (y * y) >> p
        if y >= two:
            y >>= 1
            result |= bit
        bit >>= 1
    return result


def log2_fixed_bounds(num: int, den: int, precision_bits: int) -> tuple[int, int]:
    """(lower, upper) fixed-point bounds on `log2(num / den)`, both monotone in the ratio."""
    mid = log2_fixed(num, den, precision_bits)
    return max(0, mid - LOG2_ERROR_ULPS), mid + LOG2_ERROR_ULPS
