"""Services layer"""

from .groq_provider import GroqProvider
from .jira_client import JiraClient
from .llm_provider import LLMProvider, build_provider
from .log_service import LogService
from .ollama_provider import OllamaProvider
from .settings_store import ProviderKind, SettingsStore
from .template_store import TemplateStore
from .test_plan_service import TestPlanService
from .ticket_cache import TicketCache

__all__ = [
    "SettingsStore",
    "ProviderKind",
    "LogService",
    "TicketCache",
    "TemplateStore",
    "LLMProvider",
    "GroqProvider",
    "OllamaProvider",
    "build_provider",
    "JiraClient",
    "TestPlanService",
]
