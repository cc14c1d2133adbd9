# montprime/montgomery.py
# Montgomery arithmetic over a fixed odd modulus
# - low-limb inverse by exhaustive odd search, Hensel-lifted to R = RADIX**L
# - REDC reduction, plus a fused Montgomery product on the raw limb arrays
# - left-to-right square-and-multiply kept entirely in Montgomery form

from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from .bigint import (
    BigInt, ONE, ZERO, LIMB_BITS, LIMB_MASK, RADIX, LESS, _propagate,
    add, compare, low_limbs, multiply, remainder,
    shift_limbs, subtract, truncate_low_limbs,
)
from .errors import InvalidModulus

_ODD_LIMBS = np.arange(1, RADIX, 2, dtype=np.int64)

def limb_inverse(x: int) -> int:
    """Inverse of an odd limb modulo RADIX, found by scanning every odd limb."""
    if not x & 1:
        raise InvalidModulus(f"limb {x} is even, no inverse mod {RADIX}")
    hits = np.flatnonzero(((_ODD_LIMBS * x) & LIMB_MASK) == 1)
    return int(_ODD_LIMBS[hits[0]])

def _hensel_inverse(n: BigInt, width: int) -> BigInt:
    """n^-1 mod RADIX**width, lifted one limb at a time."""
    inv0 = limb_inverse(int(n.limbs[0]))
    digits = [inv0]
    for i in range(1, width):
        prod = multiply(BigInt(digits), n)
        # limbs 1..i-1 of prod are already zero; cancel limb i
        stray = int(prod.limbs[i]) if i < len(prod) else 0
        digits.append((-stray * inv0) & LIMB_MASK)
    return BigInt(digits)

@dataclass(frozen=True)
class MontgomeryContext:
    """
    Everything derived from one odd modulus n of L limbs:
      r              = RADIX**L
      n_prime        = R - n^-1 mod R  (the negated inverse REDC multiplies by)
      mont_one       = R mod n         (1 in Montgomery form)
      mont_minus_one = n - mont_one    (n-1 in Montgomery form)
    Built once per candidate and shared by every Miller-Rabin round on it.
    """
    modulus: BigInt
    width: int
    r: BigInt
    n_prime: BigInt
    mont_one: BigInt
    mont_minus_one: BigInt

    @classmethod
    def for_modulus(cls, n: BigInt) -> "MontgomeryContext":
        if n.is_zero() or not n.is_odd():
            raise InvalidModulus("Montgomery modulus must be odd and non-zero")
        width = len(n)
        r = shift_limbs(ONE, width)
        n_prime = subtract(r, _hensel_inverse(n, width))
        mont_one = remainder(r, n)
        # n == 1 leaves a single residue class
        mont_minus_one = subtract(n, mont_one) if not mont_one.is_zero() else mont_one
        return cls(modulus=n, width=width, r=r, n_prime=n_prime,
                   mont_one=mont_one, mont_minus_one=mont_minus_one)

    def to_montgomery(self, a: BigInt) -> BigInt:
        return remainder(shift_limbs(a, self.width), self.modulus)

    def reduce(self, t: BigInt) -> BigInt:
        """REDC: t * R^-1 mod n for 0 <= t < n*R."""
        m = low_limbs(multiply(low_limbs(t, self.width), self.n_prime), self.width)
        u = truncate_low_limbs(add(t, multiply(m, self.modulus)), self.width)
        if compare(u, self.modulus) != LESS:
            u = subtract(u, self.modulus)
        return u

    def mont_mul(self, a: BigInt, b: BigInt) -> BigInt:
        """
        REDC(a*b) for a, b < n, fused on the raw limb arrays.
        Same value as reduce(multiply(a, b)).
        """
        if a.is_zero() or b.is_zero():
            return ZERO
        w = self.width
        t = _propagate(np.convolve(a.limbs, b.limbs))
        m = _propagate(np.convolve(t[:w], self.n_prime.limbs))[:w]
        mn = np.convolve(m, self.modulus.limbs)
        acc = np.zeros(max(t.size, mn.size), dtype=np.int64)
        acc[: t.size] += t
        acc[: mn.size] += mn
        # the low w limbs cancel to zero; what is left is (t + m*n) / R
        u = BigInt._wrap(_propagate(acc)[w:])
        if compare(u, self.modulus) != LESS:
            u = subtract(u, self.modulus)
        return u

    def mont_exp(self, base: BigInt, exponent: BigInt) -> BigInt:
        """base**exponent mod n, left in Montgomery form."""
        mbase = self.to_montgomery(base)
        acc = self.mont_one
        for limb in reversed(exponent.limbs.tolist()):
            for bit in range(LIMB_BITS - 1, -1, -1):
                acc = self.mont_mul(acc, acc)
                if (limb >> bit) & 1:
                    acc = self.mont_mul(acc, mbase)
        return acc

    def mod_exp(self, base: BigInt, exponent: BigInt) -> BigInt:
        """base**exponent mod n, returned in standard form."""
        # the last REDC strips the outstanding factor of R
        return self.reduce(self.mont_exp(base, exponent))

    def mod_square(self, x: BigInt) -> BigInt:
        """x*x mod n for standard-form x; same value as mod_exp(x, TWO)."""
        if compare(x, self.modulus) != LESS:
            x = remainder(x, self.modulus)
        return self.mont_mul(self.to_montgomery(x), x)
