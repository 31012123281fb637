"""User domain model."""

from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar
from uuid import UUID, uuid4

from peoplehub.exceptions import EntityNotDeletedError, ValidationError
from peoplehub.models.domain.base import SoftDeletableEntity, require_text, utcnow
from peoplehub.models.domain.email import Email
from peoplehub.models.domain.role import Role, is_manager_role

NAME_MAX_LENGTH = 100
BIO_MAX_LENGTH = 500
ADDRESS_MAX_LENGTH = 300
MIN_PERFORMANCE_RATING = 1
MAX_PERFORMANCE_RATING = 5

# Fields only visible to managers and the user themselves
SENSITIVE_FIELDS = frozenset({"salary", "national_id", "address", "performance_rating"})


def _parse_salary(salary: Decimal | int | float | None) -> Decimal | None:
    if salary is None:
        return None
    if isinstance(salary, bool) or not isinstance(salary, (Decimal, int, float)):
        raise ValidationError("Salary must be a number", field="salary")
    try:
        value = Decimal(str(salary))
    except InvalidOperation as e:
        raise ValidationError("Salary must be a number", field="salary") from e
    if not value.is_finite():
        raise ValidationError("Salary must be a finite number", field="salary")
    if value < 0:
        raise ValidationError("Salary cannot be negative", field="salary")
    return value


def _validate_rating(rating: int | None) -> None:
    if rating is None:
        return
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Performance rating must be a whole number", field="performance_rating")
    if not MIN_PERFORMANCE_RATING <= rating <= MAX_PERFORMANCE_RATING:
        raise ValidationError(
            f"Performance rating must be between {MIN_PERFORMANCE_RATING} and {MAX_PERFORMANCE_RATING}",
            field="performance_rating",
        )


def _validate_optional_text(value: str | None, field: str, label: str, max_length: int) -> None:
    if value is not None and len(value) > max_length:
        raise ValidationError(f"{label} cannot exceed {max_length} characters", field=field)


class User(SoftDeletableEntity):
    """User aggregate: identity, profile and sensitive HR fields."""

    entity_name: ClassVar[str] = "User"

    organization_id: UUID
    email: Email
    name: str
    role: Role = Role.EMPLOYEE
    department: str | None = None
    title: str | None = None
    bio: str | None = None
    avatar: str | None = None
    salary: Decimal | None = None
    national_id: str | None = None
    address: str | None = None
    performance_rating: int | None = None

    @classmethod
    def create(
        cls,
        organization_id: UUID,
        email: str | Email,
        name: str,
        role: Role = Role.EMPLOYEE,
        department: str | None = None,
        title: str | None = None,
        bio: str | None = None,
        avatar: str | None = None,
        salary: Decimal | None = None,
        national_id: str | None = None,
        address: str | None = None,
        performance_rating: int | None = None,
        id: UUID | None = None,
    ) -> "User":
        """Create a new user, validating every invariant.

        Raises:
            ValidationError: If any field breaks its rules
        """
        email_value = email if isinstance(email, Email) else Email.create(email)
        require_text(name, "name", "User name", max_length=NAME_MAX_LENGTH)
        _validate_optional_text(bio, "bio", "Bio", BIO_MAX_LENGTH)
        _validate_optional_text(address, "address", "Address", ADDRESS_MAX_LENGTH)
        salary_value = _parse_salary(salary)
        _validate_rating(performance_rating)

        now = utcnow()
        return cls(
            id=id or uuid4(),
            organization_id=organization_id,
            email=email_value,
            name=name.strip(),
            role=role,
            department=department,
            title=title,
            bio=bio,
            avatar=avatar,
            salary=salary_value,
            national_id=national_id,
            address=address,
            performance_rating=performance_rating,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def reconstitute(cls, data: dict[str, Any]) -> "User":
        """Rebuild a user from storage without validation."""
        values = dict(data)
        if not isinstance(values["email"], Email):
            values["email"] = Email.reconstitute(values["email"])
        values["role"] = Role(values["role"])
        return cls.model_construct(**values)

    def is_manager(self) -> bool:
        return is_manager_role(self.role)

    def update_profile(
        self,
        name: str | None = None,
        department: str | None = None,
        title: str | None = None,
        bio: str | None = None,
        avatar: str | None = None,
    ) -> None:
        """Update non-sensitive profile fields.

        Only provided (non-None) fields are changed.
        """
        self._ensure_not_deleted("update")
        if name is not None:
            require_text(name, "name", "Name", max_length=NAME_MAX_LENGTH)
        _validate_optional_text(bio, "bio", "Bio", BIO_MAX_LENGTH)

        if name is not None:
            self.name = name.strip()
        if department is not None:
            self.department = department
        if title is not None:
            self.title = title
        if bio is not None:
            self.bio = bio
        if avatar is not None:
            self.avatar = avatar
        self._touch()

    def update_sensitive_fields(
        self,
        salary: Decimal | None = None,
        national_id: str | None = None,
        address: str | None = None,
        performance_rating: int | None = None,
    ) -> None:
        """Update sensitive HR fields. Authorization is checked by the caller."""
        self._ensure_not_deleted("update")
        salary_value = _parse_salary(salary)
        _validate_rating(performance_rating)
        _validate_optional_text(address, "address", "Address", ADDRESS_MAX_LENGTH)

        if salary_value is not None:
            self.salary = salary_value
        if national_id is not None:
            self.national_id = national_id
        if address is not None:
            self.address = address
        if performance_rating is not None:
            self.performance_rating = performance_rating
        self._touch()

    def soft_delete(self) -> None:
        self._ensure_not_deleted("delete")
        self._mark_deleted()

    def restore(self) -> None:
        if not self.is_deleted():
            raise EntityNotDeletedError(self.entity_name, self.id)
        self.deleted_at = None
        self._touch()

    def to_object(self) -> dict[str, Any]:
        """Plain projection for persistence and serialization."""
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "email": self.email.value,
            "name": self.name,
            "role": self.role,
            "department": self.department,
            "title": self.title,
            "bio": self.bio,
            "avatar": self.avatar,
            "salary": self.salary,
            "national_id": self.national_id,
            "address": self.address,
            "performance_rating": self.performance_rating,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }

    def to_profile(self, include_sensitive: bool) -> dict[str, Any]:
        """Projection for display, without sensitive fields unless allowed."""
        data = self.to_object()
        if not include_sensitive:
            for field in SENSITIVE_FIELDS:
                data.pop(field, None)
        return data
