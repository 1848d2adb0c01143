from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope for every JSON endpoint"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
