"""Settings API routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.settings import (
    ConnectionTestResponse,
    JiraSettingsUpdate,
    LLMSettingsUpdate,
    SettingsResponse,
)
from ..schemas.template import MessageResponse
from ..schemas.test_plan import ModelsResponse
from ..services import settings_store as keys
from ..services.errors import AppError, InvalidInputError
from ..services.llm_provider import build_provider
from ..services.settings_store import ProviderKind, SettingsStore
from ..utils.validators import validate_url
from .jira import get_jira_client

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/", response_model=SettingsResponse)
async def get_all_settings(db: AsyncSession = Depends(get_db)):
    """Get all settings (secrets masked)"""
    settings = SettingsStore(db)
    return SettingsResponse(settings=await settings.get_masked())


@router.post("/jira", response_model=MessageResponse)
async def save_jira_settings(data: JiraSettingsUpdate, db: AsyncSession = Depends(get_db)):
    """Save JIRA credentials in one transaction"""
    if data.base_url is not None and not validate_url(data.base_url):
        raise InvalidInputError("Invalid JIRA URL")

    settings = SettingsStore(db)
    updates = []
    if data.base_url is not None:
        updates.append((keys.JIRA_BASE_URL, data.base_url.rstrip("/")))
    if data.username is not None:
        updates.append((keys.JIRA_USERNAME, data.username))
    if data.api_token is not None:
        updates.append((keys.JIRA_API_TOKEN, settings.seal(data.api_token)))

    await settings.batch_upsert(updates)
    return MessageResponse(message="JIRA settings saved")


@router.get("/jira/test", response_model=ConnectionTestResponse)
async def check_jira_connection(db: AsyncSession = Depends(get_db)):
    """Test JIRA connection"""
    jira = await get_jira_client(db)
    try:
        status = await jira.test_connection()
    finally:
        await jira.close()
    return ConnectionTestResponse(**status.model_dump())


@router.post("/llm", response_model=MessageResponse)
async def save_llm_settings(data: LLMSettingsUpdate, db: AsyncSession = Depends(get_db)):
    """Save provider settings in one transaction"""
    if data.provider is not None:
        try:
            ProviderKind.parse(data.provider)
        except ValueError as e:
            raise InvalidInputError(str(e))
    if data.ollama_base_url and not validate_url(data.ollama_base_url):
        raise InvalidInputError("Invalid Ollama URL")

    settings = SettingsStore(db)
    updates = []
    if data.provider is not None:
        updates.append((keys.LLM_PROVIDER, ProviderKind.parse(data.provider).value))
    if data.groq_api_key is not None:
        updates.append((keys.GROQ_API_KEY, settings.seal(data.groq_api_key)))
    if data.groq_model is not None:
        updates.append((keys.GROQ_MODEL, data.groq_model))
    if data.groq_temperature is not None:
        updates.append((keys.GROQ_TEMPERATURE, str(data.groq_temperature)))
    if data.ollama_base_url is not None:
        updates.append((keys.OLLAMA_BASE_URL, data.ollama_base_url.rstrip("/")))
    if data.ollama_model is not None:
        updates.append((keys.OLLAMA_MODEL, data.ollama_model))

    await settings.batch_upsert(updates)
    return MessageResponse(message="LLM settings saved")


@router.get("/llm/models/groq", response_model=ModelsResponse)
async def groq_models(db: AsyncSession = Depends(get_db)):
    """Models available to the stored Groq API key"""
    provider = await build_provider(ProviderKind.GROQ, SettingsStore(db))
    try:
        return ModelsResponse(models=await provider.list_models())
    except AppError as e:
        return ModelsResponse(success=False, models=[], error=e.message)
    finally:
        await provider.close()


async def _probe(kind: ProviderKind, db: AsyncSession) -> ConnectionTestResponse:
    provider = await build_provider(kind, SettingsStore(db))
    try:
        status = await provider.test_connection()
    finally:
        await provider.close()
    return ConnectionTestResponse(**status.model_dump())


@router.get("/llm/test/groq", response_model=ConnectionTestResponse)
async def check_groq_connection(db: AsyncSession = Depends(get_db)):
    """Test Groq connection"""
    return await _probe(ProviderKind.GROQ, db)


@router.get("/llm/test/ollama", response_model=ConnectionTestResponse)
async def check_ollama_connection(db: AsyncSession = Depends(get_db)):
    """Test Ollama connection"""
    return await _probe(ProviderKind.OLLAMA, db)
