"""Template schemas"""

from datetime import datetime
from typing import List, Optional

from .ticket import CamelModel


class TemplateSummary(CamelModel):
    id: int
    name: str
    filename: str
    created_at: Optional[datetime] = None


class TemplateDetail(TemplateSummary):
    content: str


class TemplateUploadResult(CamelModel):
    """Upload preview: outline and first characters of the extracted text"""

    id: int
    name: str
    filename: str
    pages: int
    sections: List[str]
    content_preview: str


class TemplateListResponse(CamelModel):
    success: bool = True
    templates: List[TemplateSummary]


class TemplateResponse(CamelModel):
    success: bool = True
    template: TemplateDetail


class TemplateUploadResponse(CamelModel):
    success: bool = True
    template: TemplateUploadResult


class MessageResponse(CamelModel):
    success: bool = True
    message: str
