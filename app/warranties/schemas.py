from pydantic import BaseModel, Field


class WarrantyUpdate(BaseModel):
    requester: str | None = None
    request_date: str | None = None
    product_code: str | None = None
    serial_number: str | None = None
    kind: str | None = None
    purchase_invoice: str | None = None
    shipment_invoice: str | None = None
    return_invoice: str | None = None
    purchase_invoice_key: str | None = None
    shipment_invoice_key: str | None = None
    return_invoice_key: str | None = None
    warranty_date: str | None = None
    ticket_number: str | None = None
    status: str | None = None
    supplier: str | None = None
    quantity: float | None = Field(default=None, ge=0)
    defect_notes: str | None = None
    total_value: float | None = Field(default=None, ge=0)


class WarrantyResponse(BaseModel):
    id: str
    requester: str
    request_date: str | None
    product_code: str
    serial_number: str
    kind: str | None
    purchase_invoice: str
    shipment_invoice: str
    return_invoice: str
    purchase_invoice_key: str
    shipment_invoice_key: str
    return_invoice_key: str
    warranty_date: str | None
    ticket_number: str
    status: str
    supplier: str
    quantity: float
    defect_notes: str
    total_value: float
    created_at: str
