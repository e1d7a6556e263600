from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from .constants import logger


class ProgressEvent(BaseModel):
    type: str
    content: str
    phase: Optional[str] = None
    data: Dict[str, Any] = {}
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


ProgressSubscriber = Callable[[ProgressEvent], None]


class ProgressChannel:
    """Ordered record of pipeline progress that front-ends can subscribe to.

    Each pipeline invocation owns its own channel. Events are kept in emit
    order and pushed synchronously to every subscriber; a subscriber that
    raises is logged and skipped so reporting never breaks the pipeline.
    """

    def __init__(self, subscribers: Optional[List[ProgressSubscriber]] = None):
        self.events: List[ProgressEvent] = []
        self._subscribers: List[ProgressSubscriber] = list(subscribers or [])

    def subscribe(self, subscriber: ProgressSubscriber) -> None:
        self._subscribers.append(subscriber)

    def emit(self, type: str, content: str, phase: Optional[str] = None, **data: Any) -> ProgressEvent:
        event = ProgressEvent(type=type, content=content, phase=phase, data=data)
        self.events.append(event)
        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.warning(f"Progress subscriber failed on '{content}': {e}")
        return event

    def progress(self, content: str, phase: Optional[str] = None, **data: Any) -> ProgressEvent:
        return self.emit("progress", content, phase, **data)

    def warning(self, content: str, phase: Optional[str] = None, **data: Any) -> ProgressEvent:
        return self.emit("warning", content, phase, **data)

    def messages(self, type: Optional[str] = None) -> List[str]:
        return [e.content for e in self.events if type is None or e.type == type]
