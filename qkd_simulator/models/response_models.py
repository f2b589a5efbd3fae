from pydantic import Field
from typing import Dict, Optional
from .qkd_models import CamelModel, SimulationParameters

class BatchRequest(CamelModel):
    parameters: SimulationParameters
    trials: int = Field(default=100, gt=0)
    seed: Optional[int] = Field(default=None, ge=0)

class BatchStatistics(CamelModel):
    trials: int
    mean_sifted_key_length: float
    std_sifted_key_length: float
    mean_qber: float
    std_qber: float
    detection_rate: float
    success_rate: float
    mean_errors_corrected: float
    outcomes: Dict[str, int]

class EavesdropperComparison(CamelModel):
    without_eve: BatchStatistics
    with_eve: BatchStatistics
    qber_increase: float
    theoretical_qber_with_eve: float
    detection_probability: float
