import os, csv, random, requests
from concurrent.futures import ThreadPoolExecutor, as_completed
from sympy import randprime, isprime

BASE = (os.getenv("BASE_URL", "http://127.0.0.1:8082") or "http://127.0.0.1:8082").rstrip("/")
TIMEOUT = float(os.getenv("READ_TIMEOUT", "120"))  # seconds

session = requests.Session()
session.headers.update({"User-Agent": "montprime-tester"})

CARMICHAEL = (561, 1105, 1729, 2465, 2821, 6601, 8911, 41041, 825265)

def is_prime_remote(n: int) -> dict:
    r = session.post(f"{BASE}/api/is_prime", json={"n": format(n, "x")}, timeout=TIMEOUT)
    r.raise_for_status()
    return r.json()

def rand_bits_prime(bits):
    return int(randprime(1 << (bits - 1), 1 << bits))

def rand_odd_composite(bits):
    # product of two primes of about half the size each
    p = rand_bits_prime(max(2, bits // 2))
    q = rand_bits_prime(max(2, bits - bits // 2))
    return p * q

def run_case(n, expect):
    res = is_prime_remote(n)
    got = "prime" if res.get("probable_prime") else "composite"
    ok = got == expect
    return {
        "n": format(n, "x"),
        "bits": n.bit_length(),
        "expect": expect,
        "got": got,
        "method": res.get("method"),
        "elapsed_ms": res.get("elapsed_ms"),
        "ok": ok,
        "reason": "" if ok else f"expected {expect}, server said {got}",
    }

def main():
    random.seed(42)
    jobs = []

    # A) Handpicked fixtures
    jobs += [(2, "prime"), (17, "prime"), ((1 << 31) - 1, "prime"), ((1 << 61) - 1, "prime"), ((1 << 127) - 1, "prime")]
    jobs += [(n, "composite") for n in CARMICHAEL]

    # B) Random primes
    for bits in [16, 24, 32, 64, 128, 256, 512]:
        for _ in range(3):
            jobs.append((rand_bits_prime(bits), "prime"))

    # C) Random composites (odd semiprimes + even values)
    for bits in [16, 32, 64, 128, 256]:
        for _ in range(3):
            jobs.append((rand_odd_composite(bits), "composite"))
            jobs.append(((random.getrandbits(bits) | 4) & ~1, "composite"))

    for n, tag in jobs:
        assert isprime(n) == (tag == "prime"), n

    results = []
    with ThreadPoolExecutor(max_workers=4) as ex:
        futs = [ex.submit(run_case, n, tag) for n, tag in jobs]
        for fut in as_completed(futs):
            try:
                results.append(fut.result())
            except requests.RequestException as e:
                results.append({"n": "?", "bits": 0, "expect": "?", "got": None, "method": None,
                                "elapsed_ms": None, "ok": False, "reason": f"http: {e}"})

    # Summary
    total = len(results)
    ok = sum(1 for r in results if r["ok"])
    by = {}
    for r in results:
        by.setdefault(r["expect"], [0, 0])
        by[r["expect"]][0 if r["ok"] else 1] += 1

    print("\n=== SUMMARY ===")
    print(f"Total: {total} | PASS: {ok} | FAIL: {total-ok}")
    for k, (p, f) in by.items():
        print(f"  {k:10s}  PASS {p:3d}  FAIL {f:3d}")

    fails = [r for r in results if not r["ok"]]
    if fails:
        fn = "accuracy_failures.csv"
        with open(fn, "w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=list(fails[0].keys()))
            w.writeheader()
            w.writerows(fails)
        print(f"\nWrote details for {len(fails)} failures to {fn}")
    else:
        print("\nNo failures recorded.")

if __name__ == "__main__":
    main()
