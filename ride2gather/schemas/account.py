"""Request and response shapes for account and profile endpoints."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .equipment import EquipmentOut


class SignupRequest(BaseModel):
    # Lengths are checked by the account core so its messages reach the client.
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    country_code: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {"email": "a@x.com", "username": "alice", "password": "secret1", "country_code": "US"}
        }
    }


class LoginRequest(BaseModel):
    identity: Optional[str] = None
    password: Optional[str] = None

    model_config = {
        "json_schema_extra": {"example": {"identity": "alice", "password": "secret1"}}
    }


class ProfileUpdate(BaseModel):
    bio: Optional[str] = None
    equipment_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("equipment_name", "bike_name"),
    )


class AccountSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    country_code: str = ""

    @field_validator("country_code", mode="before")
    @classmethod
    def _blank_if_none(cls, value: Any) -> Any:
        return "" if value is None else value


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    bio: str = ""
    avatar_ref: str = ""
    country_code: str = ""
    primary_equipment_id: Optional[int] = None
    primary_equipment: Optional[EquipmentOut] = None

    @field_validator("bio", "avatar_ref", "country_code", mode="before")
    @classmethod
    def _blank_if_none(cls, value: Any) -> Any:
        return "" if value is None else value


class AvatarOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    avatar_ref: str


class RosterEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    avatar_ref: Optional[str] = None
    last_online: Optional[str] = None


class RosterOut(BaseModel):
    ok: bool = True
    data: list[RosterEntry] = Field(default_factory=list)
