# teleconsulta/schemas/plan.py
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreatePlanRequest(BaseModel):
    """
    Body for both plan creation and plan update.

    * feature flags left as None default to True on creation and are left
      untouched on update
    * `features` left as None means "no features" on creation and "unchanged"
      on update
    """
    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, max_length=100)]
    description: Optional[Annotated[str, Field(max_length=1000)]] = None
    price: Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]
    duration_months: Optional[Annotated[int, Field(ge=1)]] = None
    max_appointments_month: Optional[Annotated[int, Field(ge=1)]] = None

    has_video_call: Optional[bool] = None
    has_chat: Optional[bool] = None
    has_prescription: Optional[bool] = None
    has_medical_certificate: Optional[bool] = None

    features: Optional[List[str]] = None


class PlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    duration_months: Optional[int] = None
    max_appointments_month: Optional[int] = None
    has_video_call: bool
    has_chat: bool
    has_prescription: bool
    has_medical_certificate: bool
    features: List[str]
    active: bool
