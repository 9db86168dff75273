"""Import session models for channel_feed."""

from enum import StrEnum

from pydantic import BaseModel, Field

__all__ = [
    "ImportSessionDTO",
    "SessionState",
]


class SessionState(StrEnum):
    """Lifecycle of a single import session row.

    A user without an active row is in the implicit "no session" state.
    Completed rows are history and are never reactivated.
    """

    ACTIVE = "active"
    COMPLETED = "completed"


class ImportSessionDTO(BaseModel, frozen=True):
    """Operator workflow state for bulk-forwarding content into a collection.

    Attributes:
        id: Session ID
        telegram_user_id: Platform user driving the import
        platform_user_id: Account the platform user is mapped to
        collection_id: Collection forwarded messages are imported into
        message_count: Number of forwarded messages ingested so far
        is_active: Whether the session is still accepting messages
        completed_at: Completion time in epoch seconds
        created_at: Start time in epoch seconds
    """

    id: str
    telegram_user_id: int
    platform_user_id: str
    collection_id: str
    message_count: int = Field(default=0)
    is_active: bool = True
    completed_at: int | None = None
    created_at: int = Field(description="Epoch seconds")
    schema_version: int = Field(default=1)

    @property
    def state(self) -> SessionState:
        return SessionState.ACTIVE if self.is_active else SessionState.COMPLETED
