# montprime/pipeline.py
# Sequential generate-and-test search for a probable prime

from __future__ import annotations
import os, random, time
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from .bigint import BigInt
from .candidates import default_rng, generate
from .primality import MR_ROUNDS, WITNESS_LIMBS, classify_candidate

# 64 limbs => 1024-bit candidates
DEFAULT_LIMBS = int(os.getenv("MONTPRIME_LIMBS", "64"))

@dataclass
class PrimeResult:
    prime: BigInt
    limbs: int
    attempts: int
    witnesses: List[BigInt]
    elapsed_ms: int
    steps: List[str] = field(default_factory=list)

def search_probable_prime(bit_capacity: int = DEFAULT_LIMBS,
                          rounds: int = MR_ROUNDS,
                          rng: Optional[random.Random] = None,
                          max_attempts: Optional[int] = None,
                          witness_limbs: int = WITNESS_LIMBS,
                          exact_width: bool = True) -> Optional[PrimeResult]:
    """
    Draw `bit_capacity`-limb candidates until one passes the tester.
    Only a composite verdict is retried; errors from the arithmetic core
    propagate. Returns None only when an explicit max_attempts runs out.
    """
    if bit_capacity < 1:
        raise ValueError("bit_capacity must be >= 1 limb")
    if rng is None:
        rng = default_rng()
    t0 = time.perf_counter()
    rejected: Counter = Counter()
    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        candidate = generate(bit_capacity, rng, exact_width=exact_width)
        verdict = classify_candidate(candidate, rounds=rounds, rng=rng, witness_limbs=witness_limbs)
        if not verdict.probable_prime:
            rejected[verdict.method] += 1
            continue
        steps = [f"rejected {count} by {method}" for method, count in sorted(rejected.items())]
        steps += verdict.steps
        steps.append(f"accepted candidate #{attempts} ({candidate.bit_length()} bits)")
        return PrimeResult(
            prime=candidate,
            limbs=len(candidate),
            attempts=attempts,
            witnesses=verdict.witnesses,
            elapsed_ms=int((time.perf_counter() - t0) * 1000),
            steps=steps,
        )
    return None

def generate_probable_prime(bit_capacity: int = DEFAULT_LIMBS,
                            rounds: int = MR_ROUNDS,
                            rng: Optional[random.Random] = None) -> BigInt:
    return search_probable_prime(bit_capacity, rounds=rounds, rng=rng).prime
