from pydantic import BaseModel, Field

from app.nonconformities.models import NonconformityStatus


class NonconformityUpdate(BaseModel):
    opened_by: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    kind: str | None = Field(default=None, min_length=1)
    severity: str | None = Field(default=None, min_length=1)
    department: str | None = Field(default=None, min_length=1)
    root_cause: str | None = None
    immediate_action: str | None = None
    action_owner: str | None = None
    due_date: str | None = None
    status: NonconformityStatus | None = None
    solution_evidence: str | None = None


class StatusChange(BaseModel):
    status: NonconformityStatus
    conclusion: str | None = None


class NonconformityResponse(BaseModel):
    id: str
    number: str
    opened_at: str
    opened_by: str
    description: str
    kind: str
    severity: str
    department: str
    root_cause: str | None
    immediate_action: str | None
    action_owner: str | None
    due_date: str | None
    solution_evidence: str | None
    status: str
    closed_at: str | None
    created_at: str
