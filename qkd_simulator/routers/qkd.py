from fastapi import APIRouter, HTTPException, Query
import logging

from ..core.config import settings
from ..models.qkd_models import SecurityAnalysis
from ..models.response_models import BatchRequest, EavesdropperComparison
from ..services.bb84_service import analyze_security
from ..services.crypto_service import CryptoService, PrivacyAmplificationError
from ..services.statistics_service import StatisticsService
from .simulation import check_limits

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/eavesdropper-comparison", response_model=EavesdropperComparison, response_model_by_alias=True)
async def compare_eavesdropper(request: BatchRequest):
    """Compare QBER statistics without and with an intercept-resend attacker"""
    check_limits(request.parameters, request.trials)
    service = StatisticsService(CryptoService(settings.DIGEST_ALGORITHM))
    try:
        return await service.compare_eavesdropper(request.parameters, request.trials, request.seed)
    except PrivacyAmplificationError as e:
        logger.error(f"Eavesdropper comparison failed: {e}")
        raise HTTPException(status_code=500, detail=f"Simulation failed: {str(e)}")

@router.get("/security-analysis", response_model=SecurityAnalysis)
async def get_security_analysis(qber: float = Query(ge=0, le=1)):
    """Classify a measured QBER against the BB84 threshold"""
    return analyze_security(qber)
