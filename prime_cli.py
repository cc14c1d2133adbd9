#!/usr/bin/env python3
import os, sys, argparse, random

from montprime.bigint import MAX_LIMBS, parse_hex, to_hex
from montprime.errors import CapacityExceeded
from montprime.hexlog import append_hex
from montprime.pipeline import DEFAULT_LIMBS, search_probable_prime
from montprime.primality import MR_ROUNDS, classify_candidate

PRIME_LOG_PATH = os.getenv("PRIME_LOG_PATH", "prime_hex.txt")

def _rng(seed):
    return random.Random(seed) if seed is not None else None

def cmd_gen(args) -> int:
    rng = _rng(args.seed)
    for _ in range(args.count):
        res = search_probable_prime(args.limbs, rounds=args.rounds, rng=rng)
        print(to_hex(res.prime), flush=True)
        if args.witnesses:
            print(f"# {len(res.witnesses)} witnesses used:")
            for w in res.witnesses:
                print(f"#   {to_hex(w)}")
        print(f"# bits={res.prime.bit_length()} attempts={res.attempts} elapsed_ms={res.elapsed_ms}",
              file=sys.stderr, flush=True)
        if not args.no_save:
            append_hex(args.out, res.prime)
    return 0

def process(text: str, rounds: int, rng) -> int:
    try:
        n = parse_hex(text)
    except (ValueError, CapacityExceeded):
        print(f"# skip: {text}", file=sys.stderr); return 2
    res = classify_candidate(n, rounds=rounds, rng=rng)
    verdict = "probable-prime" if res.probable_prime else "composite"
    print(f"{to_hex(n)}\t{verdict}\t{res.method}")
    return 0 if res.probable_prime else 1

def cmd_check(args) -> int:
    rng = _rng(args.seed)
    rc = 0
    values = args.HEX if args.HEX else (line.strip() for line in sys.stdin)
    for text in values:
        if not text: continue
        rc |= process(text, args.rounds, rng)
    return rc

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Probable primes via Montgomery exponentiation + Miller-Rabin")
    sub = ap.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("gen", help="search for probable primes and print them in hex")
    g.add_argument("--limbs", type=int, default=DEFAULT_LIMBS, help="candidate size in 16-bit limbs (64 => 1024 bits)")
    g.add_argument("--rounds", type=int, default=MR_ROUNDS, help="Miller-Rabin rounds per candidate")
    g.add_argument("--count", type=int, default=1, help="how many primes to generate")
    g.add_argument("--seed", type=int, default=None, help="rng seed for reproducibility")
    g.add_argument("--out", default=PRIME_LOG_PATH, help="hex log to append accepted primes to")
    g.add_argument("--no-save", action="store_true", help="do not append to the hex log")
    g.add_argument("--witnesses", action="store_true", help="also print the witnesses of the accepting run")
    g.set_defaults(func=cmd_gen)

    c = sub.add_parser("check", help="classify hex values (args or stdin); exit 1 if any is composite")
    c.add_argument("HEX", nargs="*", help="hex values, no 0x prefix")
    c.add_argument("--rounds", type=int, default=MR_ROUNDS)
    c.add_argument("--seed", type=int, default=None)
    c.set_defaults(func=cmd_check)

    args = ap.parse_args(argv)
    for name in ("limbs", "rounds", "count"):
        if getattr(args, name, 1) < 1:
            ap.error(f"--{name} must be >= 1")
    if getattr(args, "limbs", 1) > MAX_LIMBS:
        ap.error(f"--limbs must be <= {MAX_LIMBS}")
    return args.func(args)

if __name__ == "__main__":
    raise SystemExit(main())
