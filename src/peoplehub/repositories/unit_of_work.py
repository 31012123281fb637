"""SQLAlchemy unit of work."""

from sqlalchemy.ext.asyncio import AsyncSession

from peoplehub.repositories.absence_repository import AbsenceRepository
from peoplehub.repositories.feedback_repository import FeedbackRepository
from peoplehub.repositories.user_repository import UserRepository
from peoplehub.security.encryption import EncryptionService


class SqlAlchemyUnitOfWork:
    """Repositories sharing one session, and thus one transaction."""

    def __init__(self, session: AsyncSession, encryption: EncryptionService | None = None) -> None:
        self.session = session
        self.absences = AbsenceRepository(session)
        self.users = UserRepository(session, encryption)
        self.feedback = FeedbackRepository(session)
