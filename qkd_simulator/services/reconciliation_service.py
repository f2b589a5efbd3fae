import logging
from dataclasses import dataclass
from typing import List
from ..utils.quantum_helpers import count_mismatches, parity

logger = logging.getLogger(__name__)

@dataclass
class ReconciliationResult:
    corrected_key: List[int]
    errors_corrected: int
    keys_match: bool

def reconcile(alice_key: List[int], bob_key: List[int], block_size: int) -> ReconciliationResult:
    """
    Block parity error correction of Bob's key against Alice's.

    Both keys are split into contiguous blocks of `block_size` bits (the last
    one may be shorter). When a block's parities differ, Bob's first bit that
    differs from Alice's is flipped and the rest of the block is skipped, so
    at most one error per block is corrected. Blocks holding an even number of
    errors pass the parity check untouched, and blocks with three or more
    keep residual errors; `keys_match` reports whether any survived.
    """
    if len(alice_key) != len(bob_key):
        raise ValueError(f"Key lengths differ: {len(alice_key)} != {len(bob_key)}")
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")

    corrected = list(bob_key)
    errors_corrected = 0

    for start in range(0, len(alice_key), block_size):
        alice_block = alice_key[start:start + block_size]
        bob_block = corrected[start:start + block_size]

        if parity(alice_block) == parity(bob_block):
            continue

        for offset, (a, b) in enumerate(zip(alice_block, bob_block)):
            if a != b:
                corrected[start + offset] = a
                errors_corrected += 1
                break

    keys_match = corrected == list(alice_key)
    if not keys_match:
        residual = count_mismatches(alice_key, corrected)
        logger.warning(f"{residual} residual errors left after block parity correction")

    return ReconciliationResult(corrected_key=corrected, errors_corrected=errors_corrected, keys_match=keys_match)
