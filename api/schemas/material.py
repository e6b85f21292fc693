from pydantic import BaseModel
from typing import Optional


class SummarizeRequest(BaseModel):
    text: Optional[str] = None


class SummaryResponse(BaseModel):
    summary: str


class FileSummaryResponse(BaseModel):
    file_key: str
    text: str
    summary: str


class BlobDeleteResponse(BaseModel):
    success: bool
    message: Optional[str] = None
