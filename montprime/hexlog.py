# montprime/hexlog.py
# Append-only text log of accepted primes, one hex value per line

from __future__ import annotations
import os
from typing import List

from .bigint import BigInt, parse_hex, to_hex

def append_hex(path: str, value: BigInt) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(to_hex(value) + "\n")

def read_hex_log(path: str) -> List[BigInt]:
    if not os.path.exists(path):
        return []
    with open(path, encoding="utf-8") as f:
        return [parse_hex(line) for line in f if line.strip()]
