from collections import deque

import pytest

from qkd_simulator.models.qkd_models import Basis, SimulationParameters

R = Basis.RECTILINEAR
D = Basis.DIAGONAL

class ScriptedRandomSource:
    """Replays fixed bits and bases in draw order; runs dry loudly"""

    def __init__(self, bits=(), bases=()):
        self.bits = deque(bits)
        self.bases = deque(bases)

    def random_bit(self):
        if not self.bits:
            raise AssertionError("scripted bits exhausted")
        return self.bits.popleft()

    def random_basis(self):
        if not self.bases:
            raise AssertionError("scripted bases exhausted")
        return self.bases.popleft()

@pytest.fixture
def make_params():
    def _make(**overrides):
        values = dict(
            num_qubits=800,
            qber_sample_size=20,
            error_correction_block_size=32,
            privacy_amplification_length=128,
            enable_eve=False,
            enable_secure_mode=False,
        )
        values.update(overrides)
        return SimulationParameters(**values)
    return _make
