# teleconsulta/schemas/shared.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr

from teleconsulta.config.constants import Role

__all__ = ["Role", "UserOut", "UserSummary"]


class UserSummary(BaseModel):
    """Just enough of a user to label an appointment."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    specialty: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    national_id: str
    role: Role
    license_id: Optional[str] = None
    specialty: Optional[str] = None
    plan_id: Optional[int] = None
    plan_name: Optional[str] = None
    active: bool
    created_at: datetime

    @classmethod
    def from_model(cls, user) -> "UserOut":
        out = cls.model_validate(user)
        if user.plan is not None:
            out.plan_name = user.plan.name
        return out
