from functools import reduce
from operator import xor
from typing import List

def bits_to_string(bits: List[int]) -> str:
    """Canonical '0101...' form of a bit sequence"""
    return ''.join(map(str, bits))

def bits_to_hex(bits: List[int]) -> str:
    """Convert a bit sequence to lowercase hex, zero-padding on the right to a multiple of 4 bits"""
    padded = list(bits) + [0] * (-len(bits) % 4)
    return ''.join(format(int(bits_to_string(padded[i:i + 4]), 2), 'x')
                   for i in range(0, len(padded), 4))

def parity(bits: List[int]) -> int:
    """XOR-fold of a bit block"""
    return reduce(xor, bits, 0)

def count_mismatches(alice_key: List[int], bob_key: List[int]) -> int:
    """Number of positions where two equal-length keys differ"""
    if len(alice_key) != len(bob_key):
        raise ValueError("Keys must have equal length")
    return sum(a != b for a, b in zip(alice_key, bob_key))

def estimate_error_rate(alice_key: List[int], bob_key: List[int]) -> float:
    """Fraction of positions where two equal-length keys differ"""
    errors = count_mismatches(alice_key, bob_key)
    if not alice_key:
        return 0.0
    return errors / len(alice_key)
