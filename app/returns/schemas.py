from pydantic import BaseModel, Field


class ReturnUpdate(BaseModel):
    client_id: int | None = None
    toner_id: str | None = None
    returned_weight: float | None = Field(default=None, ge=0)
    unit_id: str | None = None
    destination: str | None = Field(default=None, min_length=1)


class ReturnResponse(BaseModel):
    id: str
    client_id: int
    toner_id: str
    toner_model: str | None = None
    returned_weight: float
    unit_id: str
    unit_name: str | None = None
    destination: str
    recovered_value: float
    created_at: str
