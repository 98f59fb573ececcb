# engagement/repositories/content_repository.py
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.models.content import Post, McqQuestion

class ContentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_post_type(self, post_id: str) -> Optional[str]:
        result = await self.session.execute(select(Post.post_type).where(Post.id == post_id))
        return result.scalar_one_or_none()

    async def mcq_exists(self, question_id: str) -> bool:
        result = await self.session.execute(select(McqQuestion.id).where(McqQuestion.id == question_id))
        return result.scalar_one_or_none() is not None
