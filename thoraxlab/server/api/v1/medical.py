"""
Medical Calculator API Endpoint.

Runs one of the respiratory calculators (GOLD stage, BODE index, ARDSNet
P/F ratio) and records the calculation in the activity log.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session, utc_now
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.io import CalculationRequest, CalculationResponse
from thoraxlab.server.services.activity import ActivityService
from thoraxlab.server.services.deps import CurrentUser
from thoraxlab.server.services.medical import calculate

logger = get_logger(__name__)
router = APIRouter(tags=["medical"])


@router.post(
    "/calculate",
    response_model=CalculationResponse,
    summary="Medical Calculation",
    description="Run a calculator: gold-stage, bode-index or ards-net.",
    responses={400: {"description": "Unknown calculator or missing/invalid inputs"}},
)
async def medical_calculate(
    data: CalculationRequest, user: CurrentUser, session: AsyncSession = Depends(get_session)
) -> CalculationResponse:
    result = calculate(data.type, data.data)
    await ActivityService(session).log(
        user.id, "medical_calculation", entity_type="calculation", details={"type": data.type, "result": result}
    )
    logger.debug(f"{data.type} calculated for {user.id}")
    return CalculationResponse(type=data.type, data=data.data, result=result, timestamp=utc_now())
