"""Common Pydantic schemas."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Money(BaseModel):
    """Amount in minor units with its ISO 4217 currency, e.g. 4500 USD is $45.00."""

    amount: int = Field(..., ge=0, description="Amount in minor units (e.g., cents)")
    currency: str = Field(..., min_length=3, max_length=3, pattern=r"^[A-Z]{3}$", description="ISO 4217 currency code")


class Violation(BaseModel):
    """One invalid field of a rejected request."""

    path: str = Field(..., description="Dotted path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details body returned for every error."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="Request path that failed")
    code: Optional[str] = Field(None, description="FULL or CANCELLATION_WINDOW where applicable")
    retryable: Optional[bool] = Field(None, description="Whether the same request may succeed later")
    conflicting_resource: Optional[Dict[str, Any]] = Field(None, description="State that caused a conflict")
    required_roles: Optional[List[str]] = Field(None, description="Roles allowed to perform the action")
    violations: Optional[List[Violation]] = Field(None, description="Invalid fields of a 422 response")


def problem_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """OpenAPI ``responses`` entry documenting Problem bodies for ``status_codes``."""
    return {
        code: {"model": Problem, "content": {"application/problem+json": {}}}
        for code in status_codes
    }
