# montprime/errors.py
# Precondition failures raised by the numeric core. Each one also subclasses
# the closest builtin so callers can catch either.

class MontprimeError(Exception):
    """Base class for errors raised by montprime."""

class InvalidModulus(MontprimeError, ValueError):
    """Montgomery setup was given a zero or even modulus."""

class DivisionByZero(MontprimeError, ZeroDivisionError):
    pass

class Underflow(MontprimeError, ArithmeticError):
    """subtract(a, b) called with a < b."""

class CapacityExceeded(MontprimeError, OverflowError):
    """A limb sequence grew past MAX_LIMBS."""
