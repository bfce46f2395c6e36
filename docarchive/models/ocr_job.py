from datetime import datetime
from typing import Optional

from .document import CamelModel


class OCRJobMetadata(CamelModel):
    id: str
    document_id: int
    file_path: str
    mime_type: str
    status: str  # pending, processing, completed, failed
    created_at: datetime
    processed_at: Optional[datetime] = None
    error: Optional[str] = None


class OCRQueueStatus(CamelModel):
    total: int
    pending: int
    processing: int
    completed: int
    failed: int
