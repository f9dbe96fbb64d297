from pydantic import BaseModel, Field


class CostItem(BaseModel):
    title: str = Field(min_length=1)
    value: float = 0.0


class TcoUpdate(BaseModel):
    model: str | None = None
    manufacturer: str | None = None
    kind: str | None = None
    printer_price: float | None = Field(default=None, ge=0)
    pis: float | None = Field(default=None, ge=0)
    ipi: float | None = Field(default=None, ge=0)
    icms: float | None = Field(default=None, ge=0)
    cofins: float | None = Field(default=None, ge=0)
    accessories: float | None = Field(default=None, ge=0)
    notes: str | None = None
    operating_costs: list[CostItem] | None = None
    indirect_costs: list[CostItem] | None = None


class TcoResponse(BaseModel):
    id: str
    model: str
    manufacturer: str
    kind: str
    printer_price: float
    pis: float
    ipi: float
    icms: float
    cofins: float
    accessories: float
    acquisition_total: float
    notes: str
    operating_costs: list[CostItem] = []
    indirect_costs: list[CostItem] = []
    created_at: str
