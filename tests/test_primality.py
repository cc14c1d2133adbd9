import random
import pytest
from sympy import isprime, randprime

from montprime.bigint import BigInt, ONE, subtract
from montprime.montgomery import MontgomeryContext
from montprime.primality import (
    SMALL_PRIMES, classify_candidate, decompose, draw_witness,
    is_probable_prime, miller_rabin_round, small_trial_division,
)

MERSENNE_EXPONENTS = [31, 61, 89, 127, 521]
# Carmichael numbers with no factor among SMALL_PRIMES, so they reach Miller-Rabin
CARMICHAEL_MR = [252601, 294409, 334153, 1152271]


def B(n):
    return BigInt.from_int(n)


@pytest.mark.parametrize("p", MERSENNE_EXPONENTS)
def test_mersenne_primes_accepted(p):
    res = classify_candidate(B(2**p - 1), rng=random.Random(p))
    assert res.probable_prime
    assert res.method == "miller-rabin"
    assert len(res.witnesses) == 10
    assert "10/10" in res.steps[-1]

@pytest.mark.parametrize("seed", [0, 1, 2])
def test_random_512_bit_primes_accepted(seed):
    random.seed(seed)
    p = int(randprime(2**511, 2**512))
    for run in range(2):
        assert is_probable_prime(B(p), rng=random.Random(seed * 10 + run))

@pytest.mark.parametrize("n", [561, 1105, 1729])
def test_small_carmichael_numbers_rejected_by_trial_division(n):
    res = classify_candidate(B(n), rng=random.Random(n))
    assert not res.probable_prime
    assert res.method == "trial"
    assert res.witnesses == []

@pytest.mark.parametrize("n", CARMICHAEL_MR)
def test_carmichael_numbers_rejected_by_miller_rabin(n):
    assert small_trial_division(B(n)) is None
    res = classify_candidate(B(n), rng=random.Random(n))
    assert not res.probable_prime
    assert res.method == "miller-rabin"
    assert 1 <= len(res.witnesses) <= 10
    assert "composite" in res.steps[-1]

@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_random_semiprimes_rejected(seed):
    random.seed(100 + seed)
    p = int(randprime(2**100, 2**101))
    q = int(randprime(2**120, 2**121))
    res = classify_candidate(B(p * q), rng=random.Random(seed))
    assert not res.probable_prime
    # stops at the first failing witness
    assert "composite" in res.steps[-1]
    assert len(res.witnesses) < 10

@pytest.mark.parametrize("n", [4, 100, 2**64, 2**200 + 2])
def test_even_values_rejected(n):
    res = classify_candidate(B(n))
    assert not res.probable_prime
    assert res.method == "even"

def test_trivial_and_tiny_values():
    assert not is_probable_prime(B(0))
    assert not is_probable_prime(B(1))
    assert is_probable_prime(B(2))
    for p in SMALL_PRIMES:
        res = classify_candidate(B(p))
        assert res.probable_prime and res.method == "trial"

def test_agrees_with_sympy_on_small_odd_numbers():
    rng = random.Random(7)
    for n in range(19, 800, 2):
        assert is_probable_prime(B(n), rng=rng) == isprime(n), n

def test_small_trial_division():
    assert small_trial_division(B(9)) == 3
    assert small_trial_division(B(5 * 2**80)) == 5
    assert small_trial_division(B(17 * 19)) == 17
    assert small_trial_division(B(19 * 23)) is None

@pytest.mark.parametrize("n", [19, 97, 2**61 - 1, 0x10001 * 2**40 + 1])
def test_decompose(n):
    d, k = decompose(B(n - 1))
    assert int(d) * 2**k == n - 1
    assert int(d) % 2 == 1

def test_miller_rabin_round_against_reference():
    n = 2**89 - 1
    ctx = MontgomeryContext.for_modulus(B(n))
    d, k = decompose(subtract(B(n), ONE))
    for w in (2, 3, 12345678901234567890):
        assert miller_rabin_round(ctx, d, k, B(w))
    # 437 = 19 * 23; 2^109 == (2, 12) and its square == (4, 6) under CRT, never -1
    m = 437
    ctx = MontgomeryContext.for_modulus(B(m))
    d, k = decompose(subtract(B(m), ONE))
    assert not miller_rabin_round(ctx, d, k, B(2))

def test_squaring_chain_stays_in_montgomery_form(monkeypatch):
    # 65537 - 1 = 2^16, so a passing round may square up to 15 times
    n = B(65537)
    ctx = MontgomeryContext.for_modulus(n)
    d, k = decompose(subtract(n, ONE))
    assert (int(d), k) == (1, 16)
    calls = []
    original = MontgomeryContext.to_montgomery
    def counting(self, a):
        calls.append(a)
        return original(self, a)
    monkeypatch.setattr(MontgomeryContext, "to_montgomery", counting)
    # 3 is a primitive root mod 65537: 3^(2^15) == -1 is reached only on the last square
    assert miller_rabin_round(ctx, d, k, B(3))
    assert len(calls) == 1

def test_rounds_are_configurable():
    res = classify_candidate(B(2**127 - 1), rounds=3, rng=random.Random(1))
    assert res.probable_prime
    assert len(res.witnesses) == 3
    with pytest.raises(ValueError):
        classify_candidate(B(2**127 - 1), rounds=0)

def test_witnesses_are_fixed_width_and_nonzero_mod_n():
    rng = random.Random(5)
    n = B(2**61 - 1)
    for _ in range(20):
        w = draw_witness(n, rng, limbs=4)
        assert len(w) <= 4
        assert w.is_odd()
        assert int(w) % (2**61 - 1) != 0
