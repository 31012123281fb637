"""User entity tests."""

from decimal import Decimal
from uuid import uuid4

import pytest

from peoplehub.exceptions import (
    EntityDeletedError,
    EntityNotDeletedError,
    InvalidEmailError,
    ValidationError,
)
from peoplehub.models.domain import Role, User
from peoplehub.models.domain.user import SENSITIVE_FIELDS


def make_user(**kwargs) -> User:
    values = {"organization_id": uuid4(), "email": "user@example.com", "name": "Test User"}
    values.update(kwargs)
    return User.create(**values)


class TestUserCreate:
    """Validating factory."""

    def test_defaults(self) -> None:
        user = make_user()

        assert user.role == Role.EMPLOYEE
        assert user.email.value == "user@example.com"
        assert not user.is_deleted()
        assert not user.is_manager()
        assert user.created_at == user.updated_at

    def test_manager(self) -> None:
        assert make_user(role=Role.MANAGER).is_manager()

    def test_invalid_email(self) -> None:
        with pytest.raises(InvalidEmailError):
            make_user(email="nope")

    @pytest.mark.parametrize("name", ["", "   ", "x" * 101])
    def test_invalid_name(self, name: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            make_user(name=name)
        assert exc_info.value.details["fields"] == ["name"]

    def test_bio_limit(self) -> None:
        assert make_user(bio="b" * 500).bio == "b" * 500
        with pytest.raises(ValidationError):
            make_user(bio="b" * 501)

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, rating: int) -> None:
        with pytest.raises(ValidationError):
            make_user(performance_rating=rating)

    def test_negative_salary(self) -> None:
        with pytest.raises(ValidationError):
            make_user(salary=Decimal("-1"))

    @pytest.mark.parametrize("rating", [3.5, "4", True])
    def test_rating_must_be_integer(self, rating) -> None:
        with pytest.raises(ValidationError) as exc_info:
            make_user(performance_rating=rating)
        assert exc_info.value.details["fields"] == ["performance_rating"]

    @pytest.mark.parametrize("salary", ["lots", Decimal("NaN"), float("inf"), True])
    def test_salary_must_be_a_finite_number(self, salary) -> None:
        with pytest.raises(ValidationError):
            make_user(salary=salary)


class TestUserMutations:
    """Profile and sensitive updates, soft delete and restore."""

    def test_update_profile_changes_only_given_fields(self) -> None:
        user = make_user(department="Sales", title="Rep")

        user.update_profile(title="Lead")

        assert user.title == "Lead"
        assert user.department == "Sales"

    def test_update_profile_validates(self) -> None:
        user = make_user()
        with pytest.raises(ValidationError):
            user.update_profile(name=" ")
        assert user.name == "Test User"

    def test_update_sensitive_fields(self) -> None:
        user = make_user()

        user.update_sensitive_fields(salary=Decimal("60000.50"), performance_rating=5)

        assert user.salary == Decimal("60000.50")
        assert user.performance_rating == 5

    @pytest.mark.parametrize(
        "changes", [{"performance_rating": 3.5}, {"performance_rating": False}, {"salary": "60000"}]
    )
    def test_update_sensitive_fields_validates_types(self, changes) -> None:
        user = make_user(salary=Decimal("1000"), performance_rating=3)

        with pytest.raises(ValidationError):
            user.update_sensitive_fields(**changes)
        assert user.salary == Decimal("1000")
        assert user.performance_rating == 3

    def test_soft_delete_then_mutations_fail(self) -> None:
        user = make_user()
        user.soft_delete()

        assert user.is_deleted()
        with pytest.raises(EntityDeletedError):
            user.update_profile(name="New Name")
        with pytest.raises(EntityDeletedError):
            user.update_sensitive_fields(salary=Decimal("1"))
        with pytest.raises(EntityDeletedError):
            user.soft_delete()

    def test_restore(self) -> None:
        user = make_user()
        user.soft_delete()

        user.restore()

        assert not user.is_deleted()

    def test_restore_live_user_fails(self) -> None:
        with pytest.raises(EntityNotDeletedError):
            make_user().restore()


class TestUserProjection:
    def test_round_trip(self) -> None:
        user = make_user(salary=Decimal("1000"), national_id="X1", address="Street 1", performance_rating=3)

        copy = User.reconstitute(user.to_object())

        assert copy == user
        assert copy.to_object() == user.to_object()

    def test_profile_hides_sensitive_fields(self) -> None:
        user = make_user(salary=Decimal("1000"), national_id="X1")

        public = user.to_profile(include_sensitive=False)
        private = user.to_profile(include_sensitive=True)

        assert not SENSITIVE_FIELDS & public.keys()
        assert SENSITIVE_FIELDS <= private.keys()
        assert public["email"] == "user@example.com"
