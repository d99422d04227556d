from pydantic import BaseModel
from typing import Optional


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


class SuccessResponse(BaseModel):
    """Acknowledgement for writes that return no resource."""

    success: bool = True
    message: Optional[str] = None
