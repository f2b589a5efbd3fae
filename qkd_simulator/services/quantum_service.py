import logging
from typing import List, Tuple
from ..models.qkd_models import Basis
from .random_source import RandomSource

logger = logging.getLogger(__name__)

class QuantumService:
    """Qubit preparation and measurement shared by Alice, Eve and Bob."""

    def __init__(self, random_source: RandomSource):
        self.random_source = random_source

    def prepare_qubits(self, num_qubits: int) -> Tuple[List[int], List[Basis]]:
        """Alice's random bits and the bases she encodes them in"""
        if num_qubits < 0:
            raise ValueError(f"num_qubits must be non-negative, got {num_qubits}")
        bits = [self.random_source.random_bit() for _ in range(num_qubits)]
        bases = self.choose_bases(num_qubits)
        return bits, bases

    def choose_bases(self, count: int) -> List[Basis]:
        return [self.random_source.random_basis() for _ in range(count)]

    def measure(self, bit: int, basis: Basis, measurement_basis: Basis) -> int:
        """
        Measure a qubit prepared as `bit` in `basis`.

        Same basis gives the prepared bit back; the other basis collapses
        the state to a uniformly random outcome.
        """
        if measurement_basis == basis:
            return bit
        return self.random_source.random_bit()

    def measure_qubits(self, bits: List[int], bases: List[Basis],
                       measurement_bases: List[Basis]) -> List[int]:
        if not len(bits) == len(bases) == len(measurement_bases):
            raise ValueError("bits, bases and measurement bases must be index-aligned")
        return [self.measure(bit, basis, chosen)
                for bit, basis, chosen in zip(bits, bases, measurement_bases)]
