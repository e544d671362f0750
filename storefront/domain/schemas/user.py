"""Pydantic schemas for the user account API.

Request and response bodies use camelCase keys, which is what the storefront
frontend sends; snake_case names are accepted too.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _number_as_text(value: Any) -> Any:
    # The frontend sends phone numbers and zip codes as JSON numbers
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# --- Requests ---

class SignupRequest(CamelModel):
    name: str
    email: str
    password: str
    avatar: str


class ActivationRequest(BaseModel):
    activation_token: str


class ResendActivationRequest(BaseModel):
    email: str


class LoginRequest(BaseModel):
    # Optional so the service can answer with its own "provide all fields" error
    email: Optional[str] = None
    password: Optional[str] = None


class UpdateUserInfoRequest(CamelModel):
    email: str
    password: str
    name: str
    phone_number: Optional[str] = None

    @field_validator("phone_number", mode="before")
    @classmethod
    def _phone_number_as_text(cls, value: Any) -> Any:
        return _number_as_text(value)


class UpdateAvatarRequest(BaseModel):
    avatar: str = ""


class AddressUpsert(CamelModel):
    id: Optional[str] = Field(default=None, alias="_id")
    address_type: str
    country: Optional[str] = None
    city: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    zip_code: Optional[str] = None

    @field_validator("zip_code", mode="before")
    @classmethod
    def _zip_code_as_text(cls, value: Any) -> Any:
        return _number_as_text(value)


class UpdatePasswordRequest(CamelModel):
    old_password: str
    new_password: str
    confirm_password: str


# --- Responses ---

class AvatarRead(CamelModel):
    public_id: Optional[str] = None
    url: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AddressRead(AddressUpsert):
    id: str = Field(alias="_id")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserRead(CamelModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    phone_number: Optional[str] = None
    role: str
    avatar: AvatarRead
    addresses: list[AddressRead] = []
    active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserResponse(BaseModel):
    success: bool = True
    user: UserRead


class SessionResponse(UserResponse):
    token: str


class UserListResponse(BaseModel):
    success: bool = True
    users: list[UserRead]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
