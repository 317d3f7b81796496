"""Pydantic schemas for account requests, reset requests and ticket lookups."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ictdesk.models.account_request import REQUEST_STATUSES


class _Submission(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class AccountRequestCreate(_Submission):
    """Fields of the public account request form."""

    selected_type: str = Field(alias="selectedType", min_length=1, max_length=64)
    surname: str = Field(min_length=1)
    first_name: str = Field(alias="firstName", min_length=1)
    middle_name: str = Field(default="", alias="middleName")
    designation: str = Field(min_length=1)
    school: str = Field(min_length=1)
    school_id: str = Field(alias="schoolID", min_length=1, max_length=32)
    personal_gmail: str = Field(alias="personalGmail", min_length=1)


class ResetRequestCreate(_Submission):
    """Fields of the public account reset form."""

    selected_type: str = Field(alias="selectedType", min_length=1, max_length=64)
    surname: str = Field(min_length=1)
    first_name: str = Field(alias="firstName", min_length=1)
    middle_name: str = Field(default="", alias="middleName")
    school: str = Field(min_length=1)
    school_id: str = Field(alias="schoolID", min_length=1, max_length=32)
    employee_number: str = Field(alias="employeeNumber", min_length=1, max_length=32)
    personal_email: str = Field(alias="personalEmail", min_length=1)
    deped_email: str = Field(
        min_length=1,
        validation_alias=AliasChoices("depedEmail", "deped_email"),
        serialization_alias="depedEmail",
    )


class AccountRequestCreated(BaseModel):
    """Identifier and ticket number of a newly submitted account request."""

    model_config = ConfigDict(populate_by_name=True)

    request_id: int = Field(alias="requestId")
    request_number: str = Field(alias="requestNumber")


class ResetRequestCreated(BaseModel):
    """Identifier and ticket number of a newly submitted reset request."""

    model_config = ConfigDict(populate_by_name=True)

    request_id: int = Field(alias="requestId")
    reset_number: str = Field(alias="resetNumber")
    deped_email: str = Field(alias="depedEmail")


class TransactionStatus(BaseModel):
    """Public view of a request looked up by its ticket number."""

    number: str
    name: str
    school: str
    status: str
    notes: str | None = None


class AccountRequestResponse(BaseModel):
    """Admin view of an account request."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    request_number: str
    selected_type: str
    name: str
    surname: str
    first_name: str
    middle_name: str
    designation: str
    school: str
    school_id: str
    personal_gmail: str
    status: str
    email_reject_reason: str | None
    created_at: datetime


class ResetRequestResponse(BaseModel):
    """Admin view of a reset request."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    reset_number: str
    selected_type: str
    name: str
    surname: str
    first_name: str
    middle_name: str
    school: str
    school_id: str
    employee_number: str
    reset_email: str
    deped_email: str
    status: str
    notes: str | None
    completed_at: datetime | None
    created_at: datetime


def _canonical_status(value: str) -> str:
    for status in REQUEST_STATUSES:
        if status.lower() == value.strip().lower():
            return status
    raise ValueError(f"status must be one of {', '.join(REQUEST_STATUSES)}")


class AccountStatusUpdate(BaseModel):
    """Admin status change for an account request."""

    status: str
    email_reject_reason: str | None = None

    @field_validator("status")
    @classmethod
    def normalize_status(cls, value: str) -> str:
        return _canonical_status(value)


class ResetStatusUpdate(BaseModel):
    """Admin status change for a reset request."""

    status: str
    notes: str | None = None

    @field_validator("status")
    @classmethod
    def normalize_status(cls, value: str) -> str:
        return _canonical_status(value)


class DesignationCreate(BaseModel):
    """New entry for the designation catalog."""

    model_config = ConfigDict(str_strip_whitespace=True)

    designation: str = Field(min_length=1, max_length=128)


class DesignationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str
