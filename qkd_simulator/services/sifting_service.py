import math
from dataclasses import dataclass
from typing import List
from ..models.qkd_models import Basis, QBERResult, SiftedKey
from ..utils.quantum_helpers import count_mismatches, estimate_error_rate

@dataclass
class QBEREstimate:
    result: QBERResult
    # Sifted key remainders after the disclosed sample is removed
    alice_remainder: List[int]
    bob_remainder: List[int]

def sift_keys(alice_bases: List[Basis], bob_bases: List[Basis],
              alice_bits: List[int], bob_bits: List[int]) -> SiftedKey:
    """
    Keep only the positions where Alice's and Bob's declared bases agree.

    Relative transmission order is preserved in both keys.
    """
    if not len(alice_bases) == len(bob_bases) == len(alice_bits) == len(bob_bits):
        raise ValueError("Sifting requires index-aligned sequences of equal length")

    indices = [i for i, (a, b) in enumerate(zip(alice_bases, bob_bases)) if a == b]
    return SiftedKey(
        alice=[alice_bits[i] for i in indices],
        bob=[bob_bits[i] for i in indices],
    )

def sample_count(sifted_length: int, sample_percent: float) -> int:
    """Number of leading sifted bits disclosed for QBER estimation"""
    count = math.ceil(sifted_length * sample_percent / 100)
    return min(max(count, 0), sifted_length)

def estimate_qber(sifted: SiftedKey, sample_percent: float) -> QBEREstimate:
    """
    Estimate the quantum bit error rate on a prefix of the sifted key.

    The sampled prefix is publicly compared and therefore consumed; only the
    remainder goes on to reconciliation.
    """
    count = sample_count(sifted.length, sample_percent)
    sample_alice, sample_bob = sifted.alice[:count], sifted.bob[:count]
    errors = count_mismatches(sample_alice, sample_bob)
    qber = estimate_error_rate(sample_alice, sample_bob)

    return QBEREstimate(
        result=QBERResult(qber=qber, errors=errors, sample_size=count),
        alice_remainder=sifted.alice[count:],
        bob_remainder=sifted.bob[count:],
    )
