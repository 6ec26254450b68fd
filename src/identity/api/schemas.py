"""Pydantic request schemas for the Identity API."""

from pydantic import BaseModel

from identity.user.user import UserRole


class RegisterUserRequest(BaseModel):
    user_id: str | None = None
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    role: UserRole = UserRole.CUSTOMER

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "idp|8f14e45f",
                    "email": "ama@example.com",
                    "first_name": "Ama",
                    "last_name": "Mensah",
                    "phone": "0241234567",
                }
            ]
        }
    }


class UpdateProfileRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
