import pytest
from sympy import isprime

import prime_worker
from montprime.bigint import BigInt
from montprime.hexlog import read_hex_log


def test_generate_prime_job(tmp_path, capsys):
    path = str(tmp_path / "primes.txt")
    res = prime_worker.generate_prime_job(limbs=2, rounds=6, seed=11, log_path=path)
    p = int(res["prime"], 16)
    assert isprime(p)
    assert res["bits"] == 32
    assert res["limbs"] == 2
    assert len(res["witnesses"]) == 6
    assert read_hex_log(path) == [BigInt.from_int(p)]
    out = capsys.readouterr().out
    assert "JOB_START kind=generate" in out and "JOB_DONE kind=generate" in out

def test_generate_prime_job_is_reproducible():
    a = prime_worker.generate_prime_job(limbs=3, seed=5, log_path="")
    b = prime_worker.generate_prime_job(limbs=3, seed=5, log_path="")
    assert a["prime"] == b["prime"]
    assert a["witnesses"] == b["witnesses"]

@pytest.mark.parametrize("n", ["7fffffff", b"7fffffff", 2**31 - 1, BigInt.from_int(2**31 - 1)])
def test_check_prime_job_inputs(n):
    res = prime_worker.check_prime_job(n, seed=1)
    assert res["n"] == "7fffffff"
    assert res["class"] == "probable-prime"
    assert res["method"] == "miller-rabin"

def test_check_prime_job_composite():
    res = prime_worker.check_prime_job(252601, rounds=10, seed=2)
    assert res["class"] == "composite"
    assert res["probable_prime"] is False
    assert res["steps"]

def test_check_prime_job_bad_hex():
    with pytest.raises(ValueError):
        prime_worker.check_prime_job("0xzz")
