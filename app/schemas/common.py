from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T

class ApiResponse(DataResponse[T], Generic[T]):
    """Envelope for writes, which confirm what happened."""
    message: str

class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
