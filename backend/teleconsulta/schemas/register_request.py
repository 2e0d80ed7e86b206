# teleconsulta/schemas/register_request.py
from pydantic import BaseModel, EmailStr, field_validator, model_validator, Field
from typing    import Optional, Annotated

from teleconsulta.schemas.shared import Role


class RegisterRequest(BaseModel):
    name:        Annotated[str, Field(min_length=3, max_length=100)]
    email:       EmailStr
    password:    Annotated[str, Field(min_length=8, max_length=72)]
    national_id: Annotated[str, Field(min_length=5, max_length=20)]
    phone:       Optional[Annotated[str, Field(max_length=30)]] = None
    role:        Role = Role.PATIENT

    # doctor-only; the service insists on both when role == DOCTOR
    license_id: Optional[Annotated[str, Field(max_length=50)]] = None
    specialty:  Optional[Annotated[str, Field(max_length=100)]] = None

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        # bcrypt silently ignores everything past 72 bytes
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes when UTF-8 encoded")
        return value

    @model_validator(mode="after")
    def _no_self_service_admins(self):
        if self.role == Role.ADMIN:
            raise ValueError("Administrator accounts cannot be self-registered")
        return self
