# teleconsulta/schemas/user.py
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field


class UpdateUserRequest(BaseModel):
    """Partial profile update; None means leave unchanged."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[Annotated[str, Field(min_length=3, max_length=100)]] = None
    phone: Optional[Annotated[str, Field(max_length=30)]] = None
    specialty: Optional[Annotated[str, Field(max_length=100)]] = None  # applied to doctors only
