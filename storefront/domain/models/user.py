"""User domain model — maps to documents in the 'users' collection."""

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, Field

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def new_id() -> str:
    return str(ObjectId())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Avatar(BaseModel):
    public_id: Optional[str] = None
    url: Optional[str] = None


class Address(BaseModel):
    id: str = Field(default_factory=new_id)
    address_type: str
    country: Optional[str] = None
    city: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    zip_code: Optional[str] = None


class User(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    email: str
    password_hash: str
    phone_number: Optional[str] = None
    role: str = ROLE_USER
    avatar: Avatar = Field(default_factory=Avatar)
    addresses: list[Address] = Field(default_factory=list)
    active: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def find_address(self, address_id: Optional[str]) -> Optional[Address]:
        if address_id is None:
            return None
        return next((a for a in self.addresses if a.id == address_id), None)

    def find_address_by_type(self, address_type: str) -> Optional[Address]:
        return next((a for a in self.addresses if a.address_type == address_type), None)

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(exclude={"id", "password_hash", "addresses"})
        doc["_id"] = ObjectId(self.id)
        doc["password"] = self.password_hash
        doc["addresses"] = [
            {"_id": a.id, **a.model_dump(exclude={"id"})} for a in self.addresses
        ]
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "User":
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        data["password_hash"] = data.pop("password")
        data["avatar"] = data.get("avatar") or {}
        data["addresses"] = [
            {"id": str(a["_id"]), **{k: v for k, v in a.items() if k != "_id"}}
            for a in data.get("addresses") or []
        ]
        return cls.model_validate(data)

    def __repr__(self):
        return f"<User {self.email}>"
