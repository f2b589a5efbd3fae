from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from enum import Enum

class Basis(str, Enum):
    RECTILINEAR = "rectilinear"  # Z-basis: |0⟩, |1⟩
    DIAGONAL = "diagonal"        # X-basis: |+⟩, |-⟩

class SimulationOutcome(str, Enum):
    """Terminal state reached by a simulation run."""
    EMPTY_SIFT = "empty_sift"
    EVE_DETECTED = "eve_detected"
    EMPTY_KEY = "empty_key"
    COMPLETED = "completed"

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class SimulationParameters(CamelModel):
    num_qubits: int = Field(gt=0)
    qber_sample_size: float = Field(ge=0, le=100)  # Percentage of the sifted key
    error_correction_block_size: int = Field(gt=0)
    privacy_amplification_length: int = Field(gt=0)  # Bits
    enable_eve: bool
    enable_secure_mode: bool

class QBERResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    qber: float = Field(ge=0, le=1)
    errors: int
    sample_size: int

class SiftedKey(BaseModel):
    alice: List[int]
    bob: List[int]

    @property
    def length(self) -> int:
        return len(self.alice)

class SimulationResult(CamelModel):
    initial_qubits: int
    sifted_key_length: int
    qber_result: Optional[QBERResult] = None
    eve_detected: bool = False
    errors_corrected: int = 0
    final_key_alice: str = ""  # Hex representation
    final_key_bob: str = ""    # Hex representation
    outcome: SimulationOutcome
    log: List[str] = []

class SecurityAnalysis(BaseModel):
    error_rate: float
    threshold: float
    secure: bool
    security_level: str
    recommended_action: str
