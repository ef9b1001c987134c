"""Template storage service"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.template import Template


class TemplateStore:
    """Uploaded templates; rows are never edited, only created or deleted"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, name: str, filename: str, content: str) -> Template:
        template = Template(name=name, filename=filename, content=content)
        self.db.add(template)
        await self.db.commit()
        await self.db.refresh(template)
        return template

    async def list(self) -> List[Template]:
        """All templates, newest first"""
        result = await self.db.execute(
            select(Template).order_by(Template.created_at.desc(), Template.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_id(self, template_id: int) -> Optional[Template]:
        result = await self.db.execute(select(Template).where(Template.id == template_id))
        return result.scalar_one_or_none()

    async def delete_by_id(self, template_id: int) -> bool:
        """False when no template had that id"""
        result = await self.db.execute(delete(Template).where(Template.id == template_id))
        await self.db.commit()
        return result.rowcount > 0
