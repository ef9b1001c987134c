"""Test plan API routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.test_plan import (
    ModelsResponse,
    TestPlanGenerateRequest,
    TestPlanHistoryResponse,
    TestPlanRecord,
    TestPlanResponse,
    TestPlanSummary,
)
from ..services.errors import AppError, InvalidInputError
from ..services.llm_provider import build_provider
from ..services.settings_store import ProviderKind, SettingsStore
from ..services.test_plan_service import TestPlanService

router = APIRouter(prefix="/api/testplan", tags=["testplan"])


def _parse_provider(value: Optional[str]) -> Optional[ProviderKind]:
    if not value:
        return None
    try:
        return ProviderKind.parse(value)
    except ValueError as e:
        raise InvalidInputError(str(e))


@router.post("/generate", response_model=TestPlanResponse)
async def generate_plan(
    data: TestPlanGenerateRequest, db: AsyncSession = Depends(get_db)
):
    """Generate a test plan for a previously fetched ticket"""
    if not data.ticket_id:
        raise InvalidInputError("Ticket ID is required")

    service = TestPlanService(db, SettingsStore(db))
    plan = await service.generate(
        ticket_id=data.ticket_id.strip(),
        template_id=data.template_id,
        provider=_parse_provider(data.provider),
    )
    return TestPlanResponse(test_plan=TestPlanRecord.from_row(plan))


@router.get("/history", response_model=TestPlanHistoryResponse)
async def plan_history(
    limit: int = Query(50, ge=1, le=500), db: AsyncSession = Depends(get_db)
):
    """Generation history, newest first"""
    plans = await TestPlanService(db, SettingsStore(db)).history(limit)
    return TestPlanHistoryResponse(plans=[TestPlanSummary.from_row(p) for p in plans])


@router.get("/models/ollama", response_model=ModelsResponse)
async def ollama_models(db: AsyncSession = Depends(get_db)):
    """Models installed on the local Ollama server"""
    provider = await build_provider(ProviderKind.OLLAMA, SettingsStore(db))
    try:
        models = await provider.list_models()
        return ModelsResponse(models=models)
    except AppError as e:
        return ModelsResponse(success=False, models=[], error=e.message)
    finally:
        await provider.close()


@router.get("/{plan_id}", response_model=TestPlanResponse)
async def get_plan(plan_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single test plan"""
    plan = await TestPlanService(db, SettingsStore(db)).get_by_id(plan_id)
    return TestPlanResponse(test_plan=TestPlanRecord.from_row(plan))
