from pydantic import BaseModel, Field


class UnitUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)


class UnitResponse(BaseModel):
    id: str
    name: str
    created_at: str
