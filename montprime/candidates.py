# montprime/candidates.py
# Random odd BigInt candidates of a requested limb length

from __future__ import annotations
import random
from typing import Optional

from .bigint import BigInt, LIMB_BITS, RADIX

_TOP_BIT = 1 << (LIMB_BITS - 1)

def default_rng() -> random.Random:
    return random.SystemRandom()

def generate(limb_count: int, rng: Optional[random.Random] = None,
             exact_width: bool = True) -> BigInt:
    """
    Uniform random limbs with the lowest one forced odd.
    exact_width also sets the top bit of the top limb, so the value has exactly
    16*limb_count bits. Without it leading zero limbs are dropped and the value
    can come out shorter than requested.
    """
    if limb_count < 1:
        raise ValueError("limb_count must be >= 1")
    if rng is None:
        rng = default_rng()
    limbs = [rng.randrange(RADIX) for _ in range(limb_count)]
    limbs[0] |= 1
    if exact_width:
        limbs[-1] |= _TOP_BIT
    return BigInt(limbs)
