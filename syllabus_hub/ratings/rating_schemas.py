from typing import Optional

from pydantic import BaseModel, Field, field_validator

# ==================== REQUEST SCHEMAS ====================

class RatingSubmit(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(None, max_length=1000)

    @field_validator("rating", mode="before")
    @classmethod
    def whole_number(cls, v):
        # 4.0 is accepted as 4; 3.5, "4" and true are not
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("rating must be an integer between 1 and 5")
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError("rating must be an integer between 1 and 5")
            v = int(v)
        return v
