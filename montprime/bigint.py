# montprime/bigint.py
# Arbitrary-precision unsigned integers on radix-65536 limbs
# - limbs live least-significant first in a read-only int64 numpy array
# - schoolbook multiply (limb convolution) + vectorised carry propagation
# - binary align-and-subtract long division
# - big-endian hex codec

from __future__ import annotations
import os
from functools import total_ordering
from typing import Iterable, Tuple
import numpy as np

from .errors import CapacityExceeded, DivisionByZero, Underflow

LIMB_BITS = 16
RADIX = 1 << LIMB_BITS
LIMB_MASK = RADIX - 1
HEX_DIGITS = LIMB_BITS // 4
MAX_LIMBS = int(os.getenv("MONTPRIME_MAX_LIMBS", "2000"))

LESS, EQUAL, GREATER = -1, 0, 1

# ---------- Representation ----------

def _strip(arr: np.ndarray) -> np.ndarray:
    nz = np.flatnonzero(arr)
    return arr[: nz[-1] + 1] if nz.size else arr[:0]

def _freeze(arr: np.ndarray) -> np.ndarray:
    arr = _strip(arr)
    if arr.size > MAX_LIMBS:
        raise CapacityExceeded(f"{arr.size} limbs exceeds MAX_LIMBS={MAX_LIMBS}")
    arr.flags.writeable = False
    return arr

def _propagate(acc: np.ndarray) -> np.ndarray:
    """Push carries (or borrows) upward until every limb is in [0, RADIX)."""
    while True:
        carry = acc >> LIMB_BITS
        if not carry.any():
            return acc
        acc = acc & LIMB_MASK
        acc[1:] += carry[:-1]
        top = int(carry[-1])
        if top < 0:
            raise Underflow("borrow out of the most significant limb")
        if top:
            acc = np.append(acc, top)

@total_ordering
class BigInt:
    """Non-negative integer stored as radix-65536 limbs, least significant first."""

    __slots__ = ("limbs",)

    def __init__(self, limbs: Iterable[int] = ()):
        arr = np.array(list(limbs), dtype=np.int64)
        if arr.size and (arr.min() < 0 or arr.max() > LIMB_MASK):
            raise ValueError(f"limb out of range [0, {RADIX})")
        self.limbs = _freeze(arr)

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "BigInt":
        # arr is already in range; only canonicalise
        obj = cls.__new__(cls)
        obj.limbs = _freeze(arr)
        return obj

    @classmethod
    def from_int(cls, value: int) -> "BigInt":
        if value < 0:
            raise ValueError("BigInt is unsigned")
        limbs = []
        while value:
            limbs.append(value & LIMB_MASK)
            value >>= LIMB_BITS
        return cls(limbs)

    def __int__(self) -> int:
        out = 0
        for limb in reversed(self.limbs.tolist()):
            out = (out << LIMB_BITS) | limb
        return out

    def __len__(self) -> int:
        return int(self.limbs.size)

    def __eq__(self, other) -> bool:
        if not isinstance(other, BigInt):
            return NotImplemented
        return compare(self, other) == EQUAL

    def __lt__(self, other) -> bool:
        if not isinstance(other, BigInt):
            return NotImplemented
        return compare(self, other) == LESS

    def __hash__(self) -> int:
        return hash(self.limbs.tobytes())

    def __repr__(self) -> str:
        return f"BigInt(0x{to_hex(self)})"

    def is_zero(self) -> bool:
        return self.limbs.size == 0

    def is_odd(self) -> bool:
        return bool(self.limbs.size and self.limbs[0] & 1)

    def bit_length(self) -> int:
        if not self.limbs.size:
            return 0
        return (self.limbs.size - 1) * LIMB_BITS + int(self.limbs[-1]).bit_length()

ZERO = BigInt()
ONE = BigInt([1])
TWO = BigInt([2])

# ---------- Arithmetic ----------

def compare(a: BigInt, b: BigInt) -> int:
    la, lb = len(a), len(b)
    if la != lb:
        return GREATER if la > lb else LESS
    diff = np.flatnonzero(a.limbs != b.limbs)
    if not diff.size:
        return EQUAL
    i = diff[-1]
    return GREATER if a.limbs[i] > b.limbs[i] else LESS

def add(a: BigInt, b: BigInt) -> BigInt:
    acc = np.zeros(max(len(a), len(b)), dtype=np.int64)
    acc[: len(a)] += a.limbs
    acc[: len(b)] += b.limbs
    return BigInt._wrap(_propagate(acc))

def subtract(a: BigInt, b: BigInt) -> BigInt:
    if compare(a, b) == LESS:
        raise Underflow(f"subtract: minuend ({a.bit_length()} bits) < subtrahend ({b.bit_length()} bits)")
    acc = a.limbs.copy()
    acc[: len(b)] -= b.limbs
    return BigInt._wrap(_propagate(acc))

def halve(a: BigInt) -> BigInt:
    if a.is_zero():
        return ZERO
    out = a.limbs >> 1
    out[:-1] |= (a.limbs[1:] & 1) << (LIMB_BITS - 1)
    return BigInt._wrap(out)

def multiply(a: BigInt, b: BigInt) -> BigInt:
    if a.is_zero() or b.is_zero():
        return ZERO
    if len(a) + len(b) - 1 > MAX_LIMBS:
        raise CapacityExceeded(f"product of {len(a)}x{len(b)} limbs exceeds MAX_LIMBS={MAX_LIMBS}")
    # limb products stay below 2^32, so the convolution sums fit int64
    return BigInt._wrap(_propagate(np.convolve(a.limbs, b.limbs)))

def shift_limbs(a: BigInt, k: int) -> BigInt:
    """a * RADIX**k"""
    if k < 0:
        raise ValueError("negative limb shift")
    if a.is_zero() or k == 0:
        return a
    return BigInt._wrap(np.concatenate((np.zeros(k, dtype=np.int64), a.limbs)))

def truncate_low_limbs(a: BigInt, k: int) -> BigInt:
    """a // RADIX**k"""
    if len(a) <= k:
        return ZERO
    return BigInt._wrap(a.limbs[k:])

def low_limbs(a: BigInt, k: int) -> BigInt:
    """a % RADIX**k"""
    return BigInt._wrap(a.limbs[:k])

def shift_bits(a: BigInt, bits: int) -> BigInt:
    """a * 2**bits"""
    if bits < 0:
        raise ValueError("negative bit shift")
    if a.is_zero():
        return ZERO
    whole, part = divmod(bits, LIMB_BITS)
    acc = np.concatenate((np.zeros(whole, dtype=np.int64), a.limbs << part))
    return BigInt._wrap(_propagate(acc))

# ---------- Division ----------

def _short_divide(a: BigInt, d: int) -> Tuple[BigInt, BigInt]:
    quotient = [0] * len(a)
    r = 0
    limbs = a.limbs.tolist()
    for i in range(len(limbs) - 1, -1, -1):
        quotient[i], r = divmod((r << LIMB_BITS) | limbs[i], d)
    return BigInt(quotient), BigInt([r])

def _divide(a: BigInt, b: BigInt, want_quotient: bool) -> Tuple[BigInt, BigInt]:
    if b.is_zero():
        raise DivisionByZero("BigInt division by zero")
    if len(b) == 1:
        return _short_divide(a, int(b.limbs[0]))
    quotient, rem = ZERO, a
    for k in range(len(a) - len(b), -1, -1):
        aligned = shift_limbs(b, k)
        while compare(aligned, rem) != GREATER:
            # largest aligned * 2^shift that still fits under rem
            shift = rem.bit_length() - aligned.bit_length()
            chunk = shift_bits(aligned, shift)
            if compare(chunk, rem) == GREATER:
                shift -= 1
                chunk = shift_bits(aligned, shift)
            rem = subtract(rem, chunk)
            if want_quotient:
                quotient = add(quotient, shift_bits(ONE, k * LIMB_BITS + shift))
    return quotient, rem

def divide(a: BigInt, b: BigInt) -> Tuple[BigInt, BigInt]:
    """Return (a // b, a % b)."""
    return _divide(a, b, True)

def remainder(a: BigInt, b: BigInt) -> BigInt:
    return _divide(a, b, False)[1]

# ---------- Hex codec ----------

_HEX_CHARS = frozenset("0123456789abcdef")

def parse_hex(text: str) -> BigInt:
    """Big-endian hex, no prefix. Case-insensitive, surrounding whitespace ignored."""
    digits = text.strip().lower()
    if not digits or not set(digits) <= _HEX_CHARS:
        raise ValueError(f"not a hex number: {text!r}")
    limbs = [int(digits[max(0, end - HEX_DIGITS):end], 16)
             for end in range(len(digits), 0, -HEX_DIGITS)]
    return BigInt(limbs)

def to_hex(a: BigInt) -> str:
    if a.is_zero():
        return "0"
    limbs = a.limbs.tolist()
    return "%x" % limbs[-1] + "".join("%04x" % limb for limb in reversed(limbs[:-1]))
