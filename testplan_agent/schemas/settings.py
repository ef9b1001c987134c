"""Settings schemas"""

from typing import Dict, Optional

from .ticket import CamelModel


class SettingsResponse(CamelModel):
    """All settings, secrets masked"""

    success: bool = True
    settings: Dict[str, str]


class JiraSettingsUpdate(CamelModel):
    """JIRA credentials; omitted fields are left unchanged"""

    base_url: Optional[str] = None
    username: Optional[str] = None
    api_token: Optional[str] = None


class LLMSettingsUpdate(CamelModel):
    """Provider settings; omitted fields are left unchanged"""

    provider: Optional[str] = None
    groq_api_key: Optional[str] = None
    groq_model: Optional[str] = None
    groq_temperature: Optional[float] = None
    ollama_base_url: Optional[str] = None
    ollama_model: Optional[str] = None


class ConnectionStatus(CamelModel):
    """Result of a health probe"""

    connected: bool
    message: str


class ConnectionTestResponse(ConnectionStatus):
    success: bool = True
