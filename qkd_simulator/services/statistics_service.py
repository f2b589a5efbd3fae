import asyncio
import logging
from collections import Counter
from typing import Optional
import numpy as np
from ..models.qkd_models import SimulationOutcome, SimulationParameters
from ..models.response_models import BatchStatistics, EavesdropperComparison
from .bb84_service import BB84Service
from .crypto_service import CryptoService
from .random_source import NumpyRandomSource

logger = logging.getLogger(__name__)

# Expected QBER of a full intercept-resend attack: Eve picks the wrong basis
# half the time and Bob then reads the wrong bit half of those times.
INTERCEPT_RESEND_QBER = 0.25

def theoretical_detection_probability(sample_size: int) -> float:
    """Probability that at least one sampled bit exposes an intercept-resend attack"""
    return 1 - (1 - INTERCEPT_RESEND_QBER) ** sample_size

class StatisticsService:
    def __init__(self, crypto_service: Optional[CryptoService] = None):
        self.crypto_service = crypto_service or CryptoService()

    async def run_batch(self, params: SimulationParameters, trials: int,
                        seed: Optional[int] = None) -> BatchStatistics:
        """
        Run independent simulations and aggregate their statistics.

        Each trial gets its own child seed, so a batch is reproducible from
        `seed` alone.
        """
        if trials <= 0:
            raise ValueError(f"trials must be positive, got {trials}")

        child_seeds = np.random.SeedSequence(seed).spawn(trials)
        sifted_lengths = np.zeros(trials)
        qbers = []
        corrections = np.zeros(trials)
        outcomes = Counter()

        for i, child in enumerate(child_seeds):
            service = BB84Service(NumpyRandomSource(child), self.crypto_service)
            result = await service.run_simulation(params)
            # Let other clients run between trials
            await asyncio.sleep(0)

            # Full sifted length; completed runs report the post-sample length
            sample = result.qber_result.sample_size if result.qber_result else 0
            if result.outcome == SimulationOutcome.COMPLETED:
                sifted_lengths[i] = result.sifted_key_length + sample
            else:
                sifted_lengths[i] = result.sifted_key_length
            if result.qber_result is not None and result.qber_result.sample_size > 0:
                qbers.append(result.qber_result.qber)
            corrections[i] = result.errors_corrected
            outcomes[result.outcome.value] += 1

        qber_array = np.array(qbers) if qbers else np.zeros(1)
        logger.info(f"Batch of {trials} trials: mean QBER {qber_array.mean():.4f}, outcomes {dict(outcomes)}")

        return BatchStatistics(
            trials=trials,
            mean_sifted_key_length=float(sifted_lengths.mean()),
            std_sifted_key_length=float(sifted_lengths.std()),
            mean_qber=float(qber_array.mean()),
            std_qber=float(qber_array.std()),
            detection_rate=outcomes[SimulationOutcome.EVE_DETECTED.value] / trials,
            success_rate=outcomes[SimulationOutcome.COMPLETED.value] / trials,
            mean_errors_corrected=float(corrections.mean()),
            outcomes=dict(outcomes),
        )

    async def compare_eavesdropper(self, params: SimulationParameters, trials: int,
                                   seed: Optional[int] = None) -> EavesdropperComparison:
        """Run the same batch without and with Eve"""
        without_eve = await self.run_batch(params.model_copy(update={"enable_eve": False}), trials, seed)
        with_eve = await self.run_batch(params.model_copy(update={"enable_eve": True}), trials, seed)

        expected_sample = int(np.ceil(params.num_qubits / 2 * params.qber_sample_size / 100))
        return EavesdropperComparison(
            without_eve=without_eve,
            with_eve=with_eve,
            qber_increase=with_eve.mean_qber - without_eve.mean_qber,
            theoretical_qber_with_eve=INTERCEPT_RESEND_QBER,
            detection_probability=theoretical_detection_probability(expected_sample),
        )
