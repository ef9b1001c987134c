"""Pydantic schemas for validation"""

from .settings import (
    ConnectionStatus,
    ConnectionTestResponse,
    JiraSettingsUpdate,
    LLMSettingsUpdate,
    SettingsResponse,
)
from .template import (
    MessageResponse,
    TemplateDetail,
    TemplateListResponse,
    TemplateResponse,
    TemplateSummary,
    TemplateUploadResponse,
    TemplateUploadResult,
)
from .test_plan import (
    GenerationMetadata,
    ModelsResponse,
    TestPlanGenerateRequest,
    TestPlanHistoryResponse,
    TestPlanRecord,
    TestPlanResponse,
    TestPlanSummary,
)
from .ticket import (
    Attachment,
    RecentTicket,
    RecentTicketsResponse,
    Ticket,
    TicketFetchRequest,
    TicketResponse,
)

__all__ = [
    "Attachment",
    "Ticket",
    "TicketFetchRequest",
    "TicketResponse",
    "RecentTicket",
    "RecentTicketsResponse",
    "GenerationMetadata",
    "TestPlanGenerateRequest",
    "TestPlanSummary",
    "TestPlanRecord",
    "TestPlanResponse",
    "TestPlanHistoryResponse",
    "ModelsResponse",
    "TemplateSummary",
    "TemplateDetail",
    "TemplateUploadResult",
    "TemplateListResponse",
    "TemplateResponse",
    "TemplateUploadResponse",
    "MessageResponse",
    "SettingsResponse",
    "JiraSettingsUpdate",
    "LLMSettingsUpdate",
    "ConnectionStatus",
    "ConnectionTestResponse",
]
