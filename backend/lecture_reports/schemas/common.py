"""
Shared schema pieces: trimmed non-empty strings and the small acknowledgement bodies most writes return.
"""
from typing import Annotated

from pydantic import BaseModel, StringConstraints

# Blank strings count as missing, same as an absent field
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class CreatedResponse(BaseModel):
    success: bool = True
    id: int
