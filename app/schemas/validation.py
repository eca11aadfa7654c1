from pydantic import BaseModel


class ValidationError(BaseModel):
    """Individual validation error"""
    field: str
    code: str  # missing, string_too_short, too_long, value_error, etc.
    message: str


class ErrorResponse(BaseModel):
    """Body returned for every failed request"""
    success: bool = False
    message: str
    error: str | None = None
    errors: list[ValidationError] | None = None
