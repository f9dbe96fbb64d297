from pydantic import BaseModel, Field


class TonerUpdate(BaseModel):
    model: str | None = Field(default=None, min_length=1)
    full_weight: float | None = Field(default=None, ge=0)
    empty_weight: float | None = Field(default=None, ge=0)
    compatible_printers: str | None = None
    color: str | None = None
    iso_area: float | None = Field(default=None, gt=0, le=1)
    sheet_capacity: int | None = Field(default=None, ge=0)
    kind: str | None = None
    price: float | None = Field(default=None, ge=0)


class TonerResponse(BaseModel):
    id: str
    model: str
    full_weight: float
    empty_weight: float
    compatible_printers: str
    color: str
    iso_area: float
    sheet_capacity: int
    kind: str
    price: float
    weight_delta: float
    price_per_sheet: float
    created_at: str
