"""User registration and profile updates.

The identity provider owns credentials; it calls in once a user signs up
so the storefront has a record to hang carts, orders and contact details
on. A welcome SMS is queued best-effort when a phone number is given.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ValidationError as PydanticValidationError

from identity.user.user import User, UserRepository, UserRole
from identity.utils.logging import logger
from notifications.notification.dispatch import submit_notification
from notifications.notification.notification import NotificationTask, NotificationType
from shared.exceptions import InvalidStateError, ValidationError


class RegisterUser(BaseModel):
    user_id: str | None = None
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    role: UserRole = UserRole.CUSTOMER


class UpdateProfile(BaseModel):
    user_id: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


def _build_user(**fields) -> User:
    try:
        return User(**fields)
    except PydanticValidationError as e:
        raise ValidationError({str(err["loc"][0]): [err["msg"]] for err in e.errors()}) from e


class UserRegistrationHandler:
    def register_user(self, command: RegisterUser) -> tuple[User, NotificationTask | None]:
        email = command.email.strip().lower()
        if "@" not in email:
            raise ValidationError({"email": ["Please enter a valid email"]})

        repo = UserRepository()
        if repo.find_one({"email": email}) is not None:
            raise InvalidStateError({"email": ["User already exists with this email"]})

        fields = {
            "email": email,
            "first_name": command.first_name.strip(),
            "last_name": command.last_name.strip(),
            "phone": command.phone,
            "role": UserRole(command.role).value,
        }
        if command.user_id:
            fields["id"] = command.user_id
        user = _build_user(**fields)
        repo.add(user)
        logger.info("user_registered", user_id=user.id, role=user.role)

        notification = None
        if user.phone:
            notification = submit_notification(NotificationType.WELCOME.value, user_id=user.id)
        return user, notification

    def update_profile(self, command: UpdateProfile) -> User:
        repo = UserRepository()
        user = repo.get(command.user_id)

        changes = command.model_dump(exclude={"user_id"}, exclude_none=True)
        merged = _build_user(**{**user.model_dump(), **changes})
        merged.updated_at = datetime.now(UTC)
        repo.add(merged)

        logger.info("user_profile_updated", user_id=merged.id, fields=sorted(changes))
        return merged
