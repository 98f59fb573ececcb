# engagement/services/weights.py
"""Таблица весов: тип события -> очки. Неизвестный тип стоит 0 очков и не является ошибкой."""
import enum
from types import MappingProxyType
from typing import Mapping


class EventKind(str, enum.Enum):
    LOGIN = "login"
    FEED_LIKE = "feed_like"
    FEED_SAVE = "feed_save"
    FEED_APPLY = "feed_apply"
    MCQ_ATTEMPT = "mcq_attempt"
    MCQ_CORRECT = "mcq_correct"
    COMMUNITY_POST = "community_post"
    CONNECTION_REQUEST = "connection_request"
    PROFILE_VIEW = "profile_view"


DEFAULT_EVENT_WEIGHTS: Mapping[str, int] = MappingProxyType({
    EventKind.LOGIN.value: 10,
    EventKind.FEED_LIKE.value: 5,
    EventKind.FEED_SAVE.value: 10,
    EventKind.FEED_APPLY.value: 20,
    EventKind.MCQ_ATTEMPT.value: 15,
    EventKind.MCQ_CORRECT.value: 25,
    EventKind.COMMUNITY_POST.value: 30,
    EventKind.CONNECTION_REQUEST.value: 15,
    EventKind.PROFILE_VIEW.value: 5,
})


class EventWeights:
    def __init__(self, weights: Mapping[str, int] = DEFAULT_EVENT_WEIGHTS):
        for kind, weight in weights.items():
            if not isinstance(weight, int) or weight < 0:
                raise ValueError(f"Weight for {kind!r} must be a non-negative integer")
        self._weights = MappingProxyType({kind.lower(): weight for kind, weight in weights.items()})

    def weight(self, event_type: str) -> int:
        return self._weights.get((event_type or "").lower(), 0)

    def score(self, counts: Mapping[str, int]) -> int:
        """Сумма весов по счетчикам {тип события: количество}"""
        return sum(self.weight(event_type) * count for event_type, count in counts.items())

    def as_dict(self) -> dict:
        return dict(self._weights)


default_weights = EventWeights()
