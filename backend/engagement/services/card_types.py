# engagement/services/card_types.py
"""
Классификация card_id: опрашиваем хранилища контента по очереди,
первое узнавшее id определяет тип. Если никто не узнал - тип по умолчанию.
"""
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from engagement.models.engagement import CardType
from engagement.repositories.content_repository import ContentRepository

DEFAULT_CARD_TYPE = CardType.CURRENT_AFFAIRS


class ContentProvider:
    """Хранилище контента, которое может узнать card_id"""

    async def try_resolve(self, card_id: str) -> Optional[CardType]:
        raise NotImplementedError


class PostProvider(ContentProvider):
    def __init__(self, repository: ContentRepository, post_type: CardType):
        self.repository = repository
        self.post_type = post_type

    async def try_resolve(self, card_id: str) -> Optional[CardType]:
        if await self.repository.get_post_type(card_id) == self.post_type.value:
            return self.post_type
        return None


class McqProvider(ContentProvider):
    def __init__(self, repository: ContentRepository):
        self.repository = repository

    async def try_resolve(self, card_id: str) -> Optional[CardType]:
        return CardType.MCQ if await self.repository.mcq_exists(card_id) else None


class CardTypeResolver:
    def __init__(self, providers: Sequence[ContentProvider], default: CardType = DEFAULT_CARD_TYPE):
        self.providers = list(providers)
        self.default = default

    async def resolve(self, card_id: str) -> CardType:
        for provider in self.providers:
            card_type = await provider.try_resolve(card_id)
            if card_type is not None:
                return card_type
        return self.default


def default_resolver(session: AsyncSession) -> CardTypeResolver:
    """Порядок: текущие события, общие знания, MCQ"""
    repository = ContentRepository(session)
    return CardTypeResolver([
        PostProvider(repository, CardType.CURRENT_AFFAIRS),
        PostProvider(repository, CardType.GENERAL_KNOWLEDGE),
        McqProvider(repository),
    ])
