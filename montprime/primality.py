# montprime/primality.py
# Probable-prime test for BigInt candidates
# - trivial / even cases
# - trial division by a handful of small primes
# - Miller-Rabin rounds on random witnesses, all sharing one Montgomery context

from __future__ import annotations
import os, random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .bigint import BigInt, ONE, TWO, LESS, compare, halve, remainder, subtract, to_hex
from .candidates import default_rng, generate
from .montgomery import MontgomeryContext

SMALL_PRIMES = (3, 5, 7, 11, 13, 17)
_SMALL_PRIME_INTS = tuple(BigInt([p]) for p in SMALL_PRIMES)

MR_ROUNDS = int(os.getenv("MONTPRIME_MR_ROUNDS", "10"))
WITNESS_LIMBS = int(os.getenv("MONTPRIME_WITNESS_LIMBS", "10"))

@dataclass
class PrimalityResult:
    n: BigInt
    probable_prime: bool
    method: str
    witnesses: List[BigInt] = field(default_factory=list)
    steps: List[str] = field(default_factory=list)

def small_trial_division(n: BigInt) -> Optional[int]:
    """Smallest of SMALL_PRIMES dividing n, or None."""
    for p, bp in zip(SMALL_PRIMES, _SMALL_PRIME_INTS):
        if remainder(n, bp).is_zero():
            return p
    return None

def decompose(n_minus_1: BigInt) -> Tuple[BigInt, int]:
    """Split n-1 into (d, k) with n-1 = d * 2^k and d odd."""
    d, k = n_minus_1, 0
    while not d.is_zero() and not d.is_odd():
        d = halve(d)
        k += 1
    return d, k

def miller_rabin_round(ctx: MontgomeryContext, d: BigInt, k: int, witness: BigInt) -> bool:
    """
    One strong round. False means the witness proves n composite.
    x stays in Montgomery form through the squaring chain, so it is compared
    against the Montgomery images of 1 and n-1.
    """
    x = ctx.mont_exp(witness, d)
    if x == ctx.mont_one or x == ctx.mont_minus_one:
        return True
    for _ in range(k - 1):
        x = ctx.mont_mul(x, x)
        if x == ctx.mont_minus_one:
            return True
    return False

def draw_witness(n: BigInt, rng: random.Random, limbs: int = WITNESS_LIMBS) -> BigInt:
    # a witness that is 0 mod n would fail every round even for a prime n
    while True:
        w = generate(limbs, rng, exact_width=False)
        if not remainder(w, n).is_zero():
            return w

def classify_candidate(n: BigInt, rounds: int = MR_ROUNDS, rng: Optional[random.Random] = None,
                       witness_limbs: int = WITNESS_LIMBS) -> PrimalityResult:
    """
    Trial division by SMALL_PRIMES, then `rounds` Miller-Rabin rounds.
    Stops at the first witness that proves n composite.
    """
    if rounds < 1:
        raise ValueError("rounds must be >= 1")
    if compare(n, TWO) == LESS:
        return PrimalityResult(n, False, "trivial", steps=["n < 2"])
    if not n.is_odd():
        prime = n == TWO
        return PrimalityResult(n, prime, "even", steps=["n is 2" if prime else "n is even"])

    p = small_trial_division(n)
    if p is not None:
        if n == BigInt([p]):
            return PrimalityResult(n, True, "trial", steps=[f"n is the small prime {p}"])
        return PrimalityResult(n, False, "trial", steps=[f"trial division found {p}"])

    if rng is None:
        rng = default_rng()
    ctx = MontgomeryContext.for_modulus(n)
    n_minus_1 = subtract(n, ONE)
    d, k = decompose(n_minus_1)
    result = PrimalityResult(n, True, "miller-rabin", steps=[f"n-1 = d * 2^{k}"])
    for i in range(1, rounds + 1):
        w = draw_witness(n, rng, witness_limbs)
        result.witnesses.append(w)
        if not miller_rabin_round(ctx, d, k, w):
            result.probable_prime = False
            result.steps.append(f"round {i}: witness {to_hex(w)} proves n composite")
            return result
    result.steps.append(f"{rounds}/{rounds} Miller-Rabin rounds passed")
    return result

def is_probable_prime(n: BigInt, rounds: int = MR_ROUNDS, rng: Optional[random.Random] = None) -> bool:
    return classify_candidate(n, rounds=rounds, rng=rng).probable_prime
