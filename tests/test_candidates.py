import random
import pytest

from montprime.candidates import generate

SEEDS = [0, 1, 2, 3, 4]
LIMB_COUNTS = [1, 2, 10, 64]


@pytest.mark.parametrize("limbs", LIMB_COUNTS)
@pytest.mark.parametrize("seed", SEEDS)
def test_candidates_are_odd_and_full_width(seed, limbs):
    c = generate(limbs, random.Random(seed))
    assert c.is_odd()
    assert len(c) == limbs
    assert c.bit_length() == 16 * limbs

@pytest.mark.parametrize("limbs", LIMB_COUNTS)
@pytest.mark.parametrize("seed", SEEDS)
def test_raw_candidates_may_shrink_but_stay_odd(seed, limbs):
    c = generate(limbs, random.Random(seed), exact_width=False)
    assert c.is_odd()
    assert 1 <= len(c) <= limbs

def test_raw_candidate_drops_leading_zero_limbs():
    rng = random.Random()
    rng.randrange = lambda *a, **k: 0
    c = generate(5, rng, exact_width=False)
    assert int(c) == 1

def test_same_seed_same_candidate():
    assert generate(8, random.Random(42)) == generate(8, random.Random(42))

def test_default_rng():
    assert generate(4).is_odd()

def test_limb_count_must_be_positive():
    with pytest.raises(ValueError):
        generate(0)
