import os, random, time
from datetime import datetime, timezone

from montprime.bigint import BigInt, parse_hex, to_hex
from montprime.hexlog import append_hex
from montprime.pipeline import DEFAULT_LIMBS, search_probable_prime
from montprime.primality import MR_ROUNDS, classify_candidate

# empty => workers do not keep a prime log
PRIME_LOG_PATH = os.getenv("PRIME_LOG_PATH", "")

# ---- tiny helpers -----------------------------------------------------------

def _to_bigint(x) -> BigInt:
    if isinstance(x, BigInt):
        return x
    if isinstance(x, (bytes, bytearray)):
        x = x.decode()
    if isinstance(x, int):
        return BigInt.from_int(x)
    return parse_hex(str(x))

def _rng(seed):
    return random.Random(int(seed)) if seed is not None else None

def now():
    return datetime.now(timezone.utc).isoformat(timespec="seconds")

def log(line: str):
    print(f"{now()} {line}", flush=True)

# ---- Public RQ jobs ---------------------------------------------------------

def generate_prime_job(limbs=DEFAULT_LIMBS, rounds=MR_ROUNDS, seed=None, log_path=None):
    """
    One sequential probable-prime search:
      candidate -> trial division -> Miller-Rabin, retried until accepted
    Returns: dict with prime (hex), bits, limbs, attempts, witnesses, elapsed_ms, steps
    """
    limbs, rounds = int(limbs), int(rounds)
    log(f"JOB_START kind=generate limbs={limbs} rounds={rounds} seeded={seed is not None}")
    res = search_probable_prime(limbs, rounds=rounds, rng=_rng(seed))
    path = PRIME_LOG_PATH if log_path is None else log_path
    if path:
        append_hex(path, res.prime)
    log(f"JOB_DONE kind=generate bits={res.prime.bit_length()} attempts={res.attempts} elapsed_ms={res.elapsed_ms}")
    return {
        "prime": to_hex(res.prime),
        "bits": res.prime.bit_length(),
        "limbs": res.limbs,
        "attempts": res.attempts,
        "witnesses": [to_hex(w) for w in res.witnesses],
        "elapsed_ms": res.elapsed_ms,
        "steps": res.steps,
    }

def check_prime_job(n, rounds=MR_ROUNDS, seed=None):
    """Classify one value (hex string, int or BigInt)."""
    n = _to_bigint(n)
    t0 = time.perf_counter()
    res = classify_candidate(n, rounds=int(rounds), rng=_rng(seed))
    ms = int((time.perf_counter() - t0) * 1000)
    log(f"JOB_DONE kind=check bits={n.bit_length()} prime={res.probable_prime} method={res.method} ms={ms}")
    return {
        "n": to_hex(n),
        "bits": n.bit_length(),
        "class": "probable-prime" if res.probable_prime else "composite",
        "probable_prime": res.probable_prime,
        "method": res.method,
        "witnesses": [to_hex(w) for w in res.witnesses],
        "elapsed_ms": ms,
        "steps": res.steps,
    }
