from fastapi import APIRouter, HTTPException, Query
from typing import Optional
import logging

from ..core.config import settings
from ..core.constants import DEFAULT_SIMULATION_PARAMETERS, PARAMETER_RANGES
from ..models.qkd_models import SimulationParameters, SimulationResult
from ..models.response_models import BatchRequest, BatchStatistics
from ..services.bb84_service import BB84Service
from ..services.crypto_service import CryptoService, PrivacyAmplificationError
from ..services.random_source import NumpyRandomSource
from ..services.statistics_service import StatisticsService

logger = logging.getLogger(__name__)

router = APIRouter()

def check_limits(params: SimulationParameters, trials: int = 1):
    if params.num_qubits > settings.MAX_NUM_QUBITS:
        raise HTTPException(status_code=422, detail=f"numQubits is limited to {settings.MAX_NUM_QUBITS}")
    if trials > settings.MAX_BATCH_TRIALS:
        raise HTTPException(status_code=422, detail=f"trials is limited to {settings.MAX_BATCH_TRIALS}")
    if trials > 1 and trials * params.num_qubits > settings.MAX_BATCH_QUBITS:
        raise HTTPException(status_code=422,
                            detail=f"trials * numQubits is limited to {settings.MAX_BATCH_QUBITS}")

def build_service(seed: Optional[int] = None) -> BB84Service:
    """Fresh service per run; an explicit seed wins over the configured one"""
    if seed is None:
        seed = settings.RANDOM_SEED
    return BB84Service(NumpyRandomSource(seed), CryptoService(settings.DIGEST_ALGORITHM))

@router.get("/defaults")
async def get_defaults():
    """Default simulation parameters and the ranges the parameter form offers"""
    return {"parameters": DEFAULT_SIMULATION_PARAMETERS, "ranges": PARAMETER_RANGES}

@router.post("/run", response_model=SimulationResult, response_model_by_alias=True)
async def run_simulation(params: SimulationParameters, seed: Optional[int] = Query(default=None, ge=0)):
    """Run one BB84 simulation"""
    check_limits(params)
    try:
        return await build_service(seed).run_simulation(params)
    except PrivacyAmplificationError as e:
        logger.error(f"Privacy amplification failed: {e}")
        raise HTTPException(status_code=500, detail=f"Simulation failed: {str(e)}")

@router.post("/batch", response_model=BatchStatistics, response_model_by_alias=True)
async def run_batch(request: BatchRequest):
    """Run many independent simulations and aggregate their statistics"""
    check_limits(request.parameters, request.trials)
    service = StatisticsService(CryptoService(settings.DIGEST_ALGORITHM))
    try:
        return await service.run_batch(request.parameters, request.trials, request.seed)
    except PrivacyAmplificationError as e:
        logger.error(f"Batch simulation failed: {e}")
        raise HTTPException(status_code=500, detail=f"Batch simulation failed: {str(e)}")
