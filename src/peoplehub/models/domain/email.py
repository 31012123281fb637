"""Email value object."""

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict

from peoplehub.exceptions import InvalidEmailError

EMAIL_MAX_LENGTH = 255


class Email(BaseModel):
    """Validated, normalized email address. Equality is by value."""

    model_config = ConfigDict(frozen=True)

    value: str

    @classmethod
    def create(cls, raw: str) -> "Email":
        """Normalize and validate an email address.

        Args:
            raw: Email as entered by the user

        Returns:
            Email value object

        Raises:
            InvalidEmailError: If the address is empty, too long or malformed
        """
        value = (raw or "").strip().lower()
        if not value:
            raise InvalidEmailError(raw or "", "Email cannot be empty")
        if len(value) > EMAIL_MAX_LENGTH:
            raise InvalidEmailError(value, "Email too long")
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidEmailError(value, f"Invalid email format: {e}") from e
        return cls(value=value)

    @classmethod
    def reconstitute(cls, value: str) -> "Email":
        """Rebuild a stored email without re-validating it."""
        return cls.model_construct(value=value)

    def __str__(self) -> str:
        return self.value
