import logging
from dataclasses import dataclass
from typing import List
from ..models.qkd_models import Basis
from .quantum_service import QuantumService

logger = logging.getLogger(__name__)

@dataclass
class InterceptResult:
    eve_bases: List[Basis]
    eve_measurements: List[int]

    # Eve re-sends her measured bits, encoded in her measurement bases
    @property
    def resent_bits(self) -> List[int]:
        return self.eve_measurements

    @property
    def resent_bases(self) -> List[Basis]:
        return self.eve_bases

class EavesdropperService:
    def __init__(self, quantum_service: QuantumService):
        self.quantum_service = quantum_service

    def intercept_and_resend(self, alice_bits: List[int], alice_bases: List[Basis]) -> InterceptResult:
        """
        Simulate Eve's intercept-and-resend attack on every qubit.

        Eve measures with a random basis per qubit. A matching basis gives her
        Alice's bit, a mismatch gives her a random one. She then replaces the
        channel content with fresh qubits prepared from her results in her
        own measurement bases (simplified re-encoding).
        """
        eve_bases = self.quantum_service.choose_bases(len(alice_bits))
        eve_measurements = self.quantum_service.measure_qubits(alice_bits, alice_bases, eve_bases)

        matched = sum(1 for a, e in zip(alice_bases, eve_bases) if a == e)
        logger.debug(f"Eve intercepted {len(alice_bits)} qubits, guessed {matched} bases correctly")

        return InterceptResult(eve_bases=eve_bases, eve_measurements=eve_measurements)
