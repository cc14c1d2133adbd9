from .bigint import BigInt, parse_hex, to_hex
from .errors import CapacityExceeded, DivisionByZero, InvalidModulus, Underflow
from .montgomery import MontgomeryContext
from .primality import classify_candidate, is_probable_prime, small_trial_division
from .pipeline import generate_probable_prime, search_probable_prime
__all__ = [
    "BigInt", "parse_hex", "to_hex",
    "CapacityExceeded", "DivisionByZero", "InvalidModulus", "Underflow",
    "MontgomeryContext",
    "classify_candidate", "is_probable_prime", "small_trial_division",
    "generate_probable_prime", "search_probable_prime",
]
