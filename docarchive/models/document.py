from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..utils.document_utils import parse_document_date, normalize_optional_text


class CamelModel(BaseModel):
    """Serialises as camelCase, accepts camelCase or snake_case on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DocumentMetadata(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    subject: Optional[str] = None
    category: str
    department: Optional[str] = None
    tags: Optional[List[str]] = None
    document_date: Optional[datetime] = None
    file_name: str  # Stored filename (timestamp-prefixed, unique)
    original_name: str
    mime_type: str
    file_size: int  # File size in bytes
    file_path: str
    extracted_text: Optional[str] = None
    ocr_processed: bool = False  # True once the background OCR pass succeeded
    created_at: datetime
    updated_at: datetime


class UploadMetadata(CamelModel):
    """Metadata sent as a JSON string alongside uploaded files."""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    subject: Optional[str] = None
    category: str = Field(min_length=1)
    department: Optional[str] = None
    document_date: Optional[datetime] = None
    tags: Optional[List[str]] = None

    @field_validator("title", "category", mode="before")
    @classmethod
    def _strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("description", "subject", "department", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_optional_text(value) if isinstance(value, str) else value

    @field_validator("document_date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_document_date(value)


class DocumentUpdate(UploadMetadata):
    """Partial metadata update; only fields present in the body are applied."""
    title: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)


class DocumentListResponse(BaseModel):
    documents: List[DocumentMetadata]
    total: int


class UploadResponse(BaseModel):
    documents: List[DocumentMetadata]


class MessageResponse(BaseModel):
    message: str


class ReprocessResponse(CamelModel):
    message: str
    job_id: str
