from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class SubmissionBase(BaseModel):
    name: str
    email: str
    message: str
    image: Optional[str] = None

class SubmissionResponse(SubmissionBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None

class SubmitResponse(BaseModel):
    message: str
    data: SubmissionBase

class MessageResponse(BaseModel):
    message: str
