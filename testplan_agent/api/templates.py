"""Template API routes"""

import asyncio
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings as app_settings
from ..database import get_db
from ..schemas.template import (
    MessageResponse,
    TemplateDetail,
    TemplateListResponse,
    TemplateResponse,
    TemplateSummary,
    TemplateUploadResponse,
    TemplateUploadResult,
)
from ..services.errors import InvalidInputError, NotFoundError
from ..services.log_service import log_service
from ..services.pdf_parser import extract_text_from_pdf, parse_sections
from ..services.template_store import TemplateStore

router = APIRouter(prefix="/api/templates", tags=["templates"])

PDF_CONTENT_TYPE = "application/pdf"
PREVIEW_CHARS = 500


@router.post("/upload", response_model=TemplateUploadResponse)
async def upload_template(
    template: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Upload a PDF template and store its extracted text"""
    if template is None or not template.filename:
        raise InvalidInputError("No file uploaded")
    if template.content_type != PDF_CONTENT_TYPE:
        raise InvalidInputError("Only PDF files are allowed")

    data = await template.read(app_settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > app_settings.MAX_UPLOAD_BYTES:
        raise InvalidInputError("File too large. Maximum size is 5MB")

    original_name = Path(template.filename).name
    file_path = app_settings.UPLOAD_DIR / f"{int(time.time() * 1000)}-{original_name}"
    file_path.write_bytes(data)

    try:
        loop = asyncio.get_running_loop()
        pdf = await loop.run_in_executor(None, extract_text_from_pdf, file_path)
    finally:
        file_path.unlink(missing_ok=True)

    if not pdf.text.strip():
        raise InvalidInputError(
            "Could not extract text from PDF. The file may be scanned/image-based."
        )

    template_name = name or original_name.replace(".pdf", "")
    store = TemplateStore(db)
    created = await store.create(template_name, original_name, pdf.text)
    log_service.info(f"Template {created.id} uploaded: {original_name} ({pdf.pages} pages)")

    return TemplateUploadResponse(
        template=TemplateUploadResult(
            id=created.id,
            name=created.name,
            filename=created.filename,
            pages=pdf.pages,
            sections=parse_sections(pdf.text),
            content_preview=pdf.text[:PREVIEW_CHARS],
        )
    )


@router.get("/", response_model=TemplateListResponse)
async def list_templates(db: AsyncSession = Depends(get_db)):
    """List all templates, newest first"""
    templates = await TemplateStore(db).list()
    return TemplateListResponse(
        templates=[TemplateSummary.model_validate(t) for t in templates]
    )


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(template_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single template"""
    template = await TemplateStore(db).get_by_id(template_id)
    if template is None:
        raise NotFoundError("Template not found")
    return TemplateResponse(template=TemplateDetail.model_validate(template))


@router.delete("/{template_id}", response_model=MessageResponse)
async def delete_template(template_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a template"""
    if not await TemplateStore(db).delete_by_id(template_id):
        raise NotFoundError("Template not found")
    return MessageResponse(message="Template deleted")
