"""Feedback domain model."""

from typing import Any, ClassVar
from uuid import UUID, uuid4

from peoplehub.exceptions import FeedbackSelfError, ValidationError
from peoplehub.models.domain.base import SoftDeletableEntity, require_text, utcnow

CONTENT_MIN_LENGTH = 10
CONTENT_MAX_LENGTH = 5000


def _validate_content(content: str | None) -> None:
    require_text(
        content,
        "content",
        "Feedback content",
        min_length=CONTENT_MIN_LENGTH,
        max_length=CONTENT_MAX_LENGTH,
    )


class Feedback(SoftDeletableEntity):
    """Feedback one user gives to another."""

    entity_name: ClassVar[str] = "Feedback"

    organization_id: UUID
    giver_id: UUID
    receiver_id: UUID
    content: str
    polished_content: str | None = None
    is_polished: bool = False

    @classmethod
    def create(
        cls,
        organization_id: UUID,
        giver_id: UUID,
        receiver_id: UUID,
        content: str,
        id: UUID | None = None,
    ) -> "Feedback":
        """Create new feedback.

        Raises:
            FeedbackSelfError: If giver and receiver are the same user
            ValidationError: If content length is out of bounds
        """
        if giver_id == receiver_id:
            raise FeedbackSelfError()
        _validate_content(content)

        now = utcnow()
        return cls(
            id=id or uuid4(),
            organization_id=organization_id,
            giver_id=giver_id,
            receiver_id=receiver_id,
            content=content,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def reconstitute(cls, data: dict[str, Any]) -> "Feedback":
        """Rebuild feedback from storage without validation."""
        return cls.model_construct(**data)

    @property
    def display_content(self) -> str:
        """Polished content when available, otherwise the original."""
        if self.is_polished and self.polished_content:
            return self.polished_content
        return self.content

    def polish(self, polished_content: str) -> None:
        self._ensure_not_deleted("polish")
        if not polished_content or not polished_content.strip():
            raise ValidationError("Polished content cannot be empty", field="polished_content")
        self.polished_content = polished_content
        self.is_polished = True
        self._touch()

    def _reset_polish(self) -> None:
        self.polished_content = None
        self.is_polished = False
        self._touch()

    def update_content(self, content: str) -> None:
        """Replace the content. Any previous polish no longer applies."""
        self._ensure_not_deleted("update")
        _validate_content(content)
        self.content = content
        if self.is_polished or self.polished_content is not None:
            self._reset_polish()
        self._touch()

    def soft_delete(self) -> None:
        self._ensure_not_deleted("delete")
        self._mark_deleted()

    def is_from(self, user_id: UUID) -> bool:
        return self.giver_id == user_id

    def is_for(self, user_id: UUID) -> bool:
        return self.receiver_id == user_id

    def to_object(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "giver_id": self.giver_id,
            "receiver_id": self.receiver_id,
            "content": self.content,
            "polished_content": self.polished_content,
            "is_polished": self.is_polished,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }
