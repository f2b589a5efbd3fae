import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Union
from ..core.constants import QBER_THRESHOLD
from ..models.qkd_models import (
    QBERResult, SecurityAnalysis, SimulationOutcome, SimulationParameters, SimulationResult,
)
from ..utils.quantum_helpers import bits_to_hex
from .crypto_service import CryptoService
from .eavesdropper_service import EavesdropperService
from .quantum_service import QuantumService
from .random_source import NumpyRandomSource, RandomSource
from .reconciliation_service import reconcile
from .sifting_service import estimate_qber, sift_keys

logger = logging.getLogger(__name__)

# Terminal outcomes of a run
@dataclass(frozen=True)
class EmptySift:
    pass

@dataclass(frozen=True)
class EveDetected:
    sifted_key_length: int
    qber_result: QBERResult

@dataclass(frozen=True)
class EmptyReconciledKey:
    sifted_key_length: int
    qber_result: QBERResult
    errors_corrected: int

@dataclass(frozen=True)
class Completed:
    key_length: int  # Reconciled key length, after the QBER sample is removed
    qber_result: QBERResult
    errors_corrected: int
    final_key_alice: str
    final_key_bob: str

Outcome = Union[EmptySift, EveDetected, EmptyReconciledKey, Completed]

def build_result(num_qubits: int, outcome: Outcome, log: List[str]) -> SimulationResult:
    """Single place where every terminal outcome becomes a SimulationResult"""
    if isinstance(outcome, EmptySift):
        return SimulationResult(initial_qubits=num_qubits, sifted_key_length=0,
                                outcome=SimulationOutcome.EMPTY_SIFT, log=log)
    if isinstance(outcome, EveDetected):
        return SimulationResult(initial_qubits=num_qubits, sifted_key_length=outcome.sifted_key_length,
                                qber_result=outcome.qber_result, eve_detected=True,
                                outcome=SimulationOutcome.EVE_DETECTED, log=log)
    if isinstance(outcome, EmptyReconciledKey):
        return SimulationResult(initial_qubits=num_qubits, sifted_key_length=outcome.sifted_key_length,
                                qber_result=outcome.qber_result, errors_corrected=outcome.errors_corrected,
                                outcome=SimulationOutcome.EMPTY_KEY, log=log)
    if isinstance(outcome, Completed):
        return SimulationResult(initial_qubits=num_qubits, sifted_key_length=outcome.key_length,
                                qber_result=outcome.qber_result, errors_corrected=outcome.errors_corrected,
                                final_key_alice=outcome.final_key_alice, final_key_bob=outcome.final_key_bob,
                                outcome=SimulationOutcome.COMPLETED, log=log)
    raise TypeError(f"Unknown simulation outcome: {outcome!r}")

def analyze_security(error_rate: float) -> SecurityAnalysis:
    """Analyze security based on error rate"""
    return SecurityAnalysis(
        error_rate=error_rate,
        threshold=QBER_THRESHOLD,
        secure=error_rate <= QBER_THRESHOLD,
        security_level="HIGH" if error_rate < 0.05 else "MEDIUM" if error_rate <= QBER_THRESHOLD else "COMPROMISED",
        recommended_action="PROCEED" if error_rate <= QBER_THRESHOLD else "ABORT - POSSIBLE EAVESDROPPING",
    )

def _percent(value: float) -> str:
    return f"{value * 100:.2f}%"

class BB84Service:
    def __init__(self, random_source: Optional[RandomSource] = None,
                 crypto_service: Optional[CryptoService] = None):
        self.random_source = random_source or NumpyRandomSource()
        self.quantum_service = QuantumService(self.random_source)
        self.eavesdropper_service = EavesdropperService(self.quantum_service)
        self.crypto_service = crypto_service or CryptoService()

    async def run_simulation(self, params: SimulationParameters) -> SimulationResult:
        """
        Run one complete BB84 exchange and return the result with its trace.

        Every protocol-level dead end (no matching bases, eavesdropper
        detected, nothing left to amplify) ends the run early with a valid
        result. Only digest failures propagate.
        """
        num_qubits = params.num_qubits
        log: List[str] = []
        log.append("Starting BB84 Simulation...")
        shown = params.model_dump(by_alias=True)
        shown["privacyAmplificationLength"] = f"{params.privacy_amplification_length} bits"
        log.append(f"Parameters: {json.dumps(shown)}")
        logger.info(f"BB84 run: {num_qubits} qubits, eve={params.enable_eve}, secure={params.enable_secure_mode}")

        # 1. Alice prepares qubits
        alice_bits, alice_bases = self.quantum_service.prepare_qubits(num_qubits)
        log.append(f"Alice prepared {num_qubits} qubits with random bits and bases.")

        transmitted_bits, transmitted_bases = alice_bits, alice_bases

        # Optional intercept-resend attack
        if params.enable_eve:
            log.append("Eve is enabled: Performing intercept-resend attack.")
            intercept = self.eavesdropper_service.intercept_and_resend(alice_bits, alice_bases)
            transmitted_bits, transmitted_bases = intercept.resent_bits, intercept.resent_bases
            log.append("Eve intercepted, measured, and re-sent qubits to Bob using her measurement bases.")

        # 2. Bob measures
        bob_bases = self.quantum_service.choose_bases(num_qubits)
        bob_bits = self.quantum_service.measure_qubits(transmitted_bits, transmitted_bases, bob_bases)
        log.append(f"Bob measured {num_qubits} qubits with random bases.")

        # 3. Sifting on the publicly declared bases
        sifted = sift_keys(alice_bases, bob_bases, alice_bits, bob_bits)
        log.append(f"Basis Sifting completed. Sifted key length: {sifted.length} bits.")
        if sifted.length == 0:
            log.append("No matching bases. Simulation cannot proceed with QBER, "
                       "Error Correction, or Privacy Amplification.")
            logger.info("BB84 run ended: no matching bases")
            return build_result(num_qubits, EmptySift(), log)

        # 4. Parameter estimation
        estimate = estimate_qber(sifted, params.qber_sample_size)
        qber_result = estimate.result
        qber = qber_result.qber
        log.append(f"QBER Check: Sample size {qber_result.sample_size} bits. "
                   f"Errors found: {qber_result.errors}. QBER: {_percent(qber)}.")

        if params.enable_secure_mode and qber > QBER_THRESHOLD:
            log.append(f"ALERT: QBER ({_percent(qber)}) exceeds threshold ({_percent(QBER_THRESHOLD)}). "
                       "Eavesdropping detected! Key discarded.")
            logger.warning(f"Eavesdropping detected: QBER {_percent(qber)} over {_percent(QBER_THRESHOLD)}")
            return build_result(num_qubits, EveDetected(sifted.length, qber_result), log)
        elif params.enable_eve and qber > QBER_THRESHOLD / 2 and not params.enable_secure_mode:
            log.append(f"Note: QBER ({_percent(qber)}) is higher than expected. Eve might be present, "
                       "but secure mode is not enabled to enforce a strict threshold.")
        elif not params.enable_eve and qber > 0:
            log.append(f"Note: Minor QBER detected ({_percent(qber)}). Could be due to simulated noise "
                       "or imperfections in quantum measurements.")

        alice_key, bob_key = estimate.alice_remainder, estimate.bob_remainder
        log.append(f"Key for Error Correction: Remaining {len(alice_key)} bits after QBER sampling.")

        # 5. Error correction
        reconciliation = reconcile(alice_key, bob_key, params.error_correction_block_size)
        log.append(f"Error Correction completed. {reconciliation.errors_corrected} errors corrected "
                   "in the remaining key.")
        if reconciliation.keys_match:
            log.append("Keys successfully reconciled: Alice and Bob now share an identical key "
                       "(after QBER sample removal and error correction).")
        else:
            log.append("WARNING: Keys do not perfectly match after error correction! Blocks with more "
                       "than one error were not fully reconciled.")

        # 6. Privacy amplification
        if not reconciliation.corrected_key:
            log.append("Cannot perform Privacy Amplification: Pre-amplified key is empty.")
            logger.info("BB84 run ended: nothing left after QBER sampling")
            return build_result(num_qubits, EmptyReconciledKey(sifted.length, qber_result,
                                                               reconciliation.errors_corrected), log)

        logger.debug(f"Reconciled key (hex): {bits_to_hex(reconciliation.corrected_key)}")
        length = params.privacy_amplification_length
        final_key_alice = await self.crypto_service.amplify_privacy(alice_key, length)
        final_key_bob = await self.crypto_service.amplify_privacy(reconciliation.corrected_key, length)

        log.append(f"Privacy Amplification completed ({self.crypto_service.digest_algorithm.upper()} "
                   f"hashing and truncation). Desired final key length: {length} bits.")
        log.append(f"Final Shared Key (Alice - Hex): {final_key_alice}")
        log.append(f"Final Shared Key (Bob - Hex): {final_key_bob}")
        logger.info(f"BB84 run completed: {len(alice_key)}-bit reconciled key, QBER {_percent(qber)}")

        return build_result(num_qubits, Completed(len(alice_key), qber_result, reconciliation.errors_corrected,
                                                  final_key_alice, final_key_bob), log)
