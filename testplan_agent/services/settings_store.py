"""Settings management service"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from ..config import settings as app_settings
from ..models.setting import Setting
from ..utils.encryption import decrypt, encrypt
from .log_service import log_service

# Tracker
JIRA_BASE_URL = "jira_base_url"
JIRA_USERNAME = "jira_username"
JIRA_API_TOKEN = "jira_api_token"

# Provider selection and cloud backend
LLM_PROVIDER = "llm_provider"
GROQ_API_KEY = "groq_api_key"
GROQ_MODEL = "groq_model"
GROQ_TEMPERATURE = "groq_temperature"

# Local backend
OLLAMA_BASE_URL = "ollama_base_url"
OLLAMA_MODEL = "ollama_model"

SETTING_KEYS = (
    JIRA_BASE_URL,
    JIRA_USERNAME,
    JIRA_API_TOKEN,
    LLM_PROVIDER,
    GROQ_API_KEY,
    GROQ_MODEL,
    GROQ_TEMPERATURE,
    OLLAMA_BASE_URL,
    OLLAMA_MODEL,
)

MASK = "••••••••"

DEFAULT_TEMPERATURE = 0.3
MAX_OUTPUT_TOKENS = 8192


class ProviderKind(str, Enum):
    """LLM backends"""

    GROQ = "groq"  # Cloud
    OLLAMA = "ollama"  # Local

    @classmethod
    def parse(cls, value: str) -> "ProviderKind":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown provider '{value}'. Expected one of: {choices}")


class SettingsStore:
    """Key/value settings persisted in the settings table"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._cache: Dict[str, str] = {}

    async def load_cache(self):
        """Load all settings into cache"""
        result = await self.db.execute(select(Setting))
        self._cache = {setting.key: setting.value for setting in result.scalars()}

    async def get(self, key: str) -> Optional[str]:
        """Stored value, or None when the key was never saved"""
        if key in self._cache:
            return self._cache[key]

        result = await self.db.execute(select(Setting).where(Setting.key == key))
        setting = result.scalar_one_or_none()
        if setting is None:
            return None

        self._cache[key] = setting.value
        return setting.value

    async def get_all(self) -> Dict[str, str]:
        """Get all settings"""
        await self.load_cache()
        return self._cache.copy()

    async def get_masked(self) -> Dict[str, str]:
        """All settings with secret values hidden"""
        result = await self.db.execute(select(Setting).order_by(Setting.key))
        return {
            row.key: (MASK if row.value else "") if row.is_secret else row.value
            for row in result.scalars()
        }

    async def _stage(self, key: str, value: str):
        """Insert or overwrite one row inside the current transaction"""
        result = await self.db.execute(select(Setting).where(Setting.key == key))
        setting = result.scalar_one_or_none()

        if setting:
            setting.value = value
            setting.updated_at = func.now()
        else:
            self.db.add(Setting(key=key, value=value))

        await self.db.flush()

    async def upsert(self, key: str, value: str):
        """Set setting value"""
        await self.batch_upsert([(key, value)])

    async def batch_upsert(self, items: Iterable[Tuple[str, str]]):
        """Upsert several keys in one transaction; all or nothing"""
        items = list(items)
        if not items:
            return

        try:
            for key, value in items:
                await self._stage(key, value)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            self._cache.clear()
            raise

        self._cache.update(dict(items))
        log_service.info(f"Settings saved: {', '.join(key for key, _ in items)}")

    async def get_secret(self, key: str) -> Optional[str]:
        """Decrypted secret, or None when the key was never saved"""
        value = await self.get(key)
        if value is None:
            return None
        return decrypt(value)

    @staticmethod
    def seal(value: str) -> str:
        """Encrypt a secret before passing it to upsert"""
        return encrypt(value)

    async def default_provider(self) -> ProviderKind:
        """Stored provider choice, falling back to the cloud backend"""
        value = await self.get(LLM_PROVIDER)
        if not value:
            return ProviderKind.GROQ
        try:
            return ProviderKind.parse(value)
        except ValueError as e:
            log_service.error(f"Ignoring stored provider setting: {e}")
            return ProviderKind.GROQ


def _parse_temperature(value: Optional[str]) -> float:
    if value is None or value == "":
        return DEFAULT_TEMPERATURE
    try:
        return float(value)
    except ValueError:
        log_service.error(f"Invalid temperature setting '{value}', using default")
        return DEFAULT_TEMPERATURE


@dataclass(frozen=True)
class TrackerConfig:
    """JIRA connection settings"""

    base_url: str
    username: str
    api_token: str

    @classmethod
    async def load(cls, store: SettingsStore) -> Optional["TrackerConfig"]:
        """None unless all three settings were saved"""
        base_url = await store.get(JIRA_BASE_URL)
        username = await store.get(JIRA_USERNAME)
        api_token = await store.get_secret(JIRA_API_TOKEN)

        if base_url is None or username is None or api_token is None:
            return None
        return cls(base_url=base_url.rstrip("/"), username=username, api_token=api_token)


@dataclass(frozen=True)
class CloudProviderConfig:
    """Groq settings; api_key is None when no key was saved"""

    api_key: Optional[str]
    model: str = "llama-3.3-70b-versatile"
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = MAX_OUTPUT_TOKENS
    base_url: str = "https://api.groq.com/openai/v1"
    timeout: float = 30.0

    @classmethod
    async def load(cls, store: SettingsStore) -> "CloudProviderConfig":
        return cls(
            api_key=await store.get_secret(GROQ_API_KEY),
            model=await store.get(GROQ_MODEL) or cls.model,
            temperature=_parse_temperature(await store.get(GROQ_TEMPERATURE)),
            base_url=app_settings.GROQ_BASE_URL.rstrip("/"),
            timeout=app_settings.HTTP_TIMEOUT,
        )


@dataclass(frozen=True)
class LocalProviderConfig:
    """Ollama settings"""

    base_url: str = "http://localhost:11434"
    model: str = "llama3"
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = MAX_OUTPUT_TOKENS
    generate_timeout: float = 120.0
    probe_timeout: float = 5.0

    @classmethod
    async def load(cls, store: SettingsStore) -> "LocalProviderConfig":
        base_url = await store.get(OLLAMA_BASE_URL) or cls.base_url
        return cls(
            base_url=base_url.rstrip("/"),
            model=await store.get(OLLAMA_MODEL) or cls.model,
        )
