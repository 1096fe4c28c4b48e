"""Base schema"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with ORM attribute support"""
    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    """Generic message response"""
    success: bool = True
    message: str
