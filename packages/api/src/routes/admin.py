# This project was developed with assistance from AI tools.
"""Admin endpoints: the auto-transition sweep."""

import logging

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import require_roles
from ..schemas.workflow import AutoTransitionResult
from ..services.workflow import auto_transition_policies

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/auto-transitions",
    response_model=AutoTransitionResult,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def run_auto_transitions(
    session: AsyncSession = Depends(get_db),
) -> AutoTransitionResult:
    """Advance completed policies to investigation and expire lapsed ones.

    Safe to call repeatedly; meant for a cron job or an operator.
    """
    result = await auto_transition_policies(session)
    logger.info("Auto-transition sweep triggered via API")
    return result
