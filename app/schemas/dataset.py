import uuid
from datetime import datetime
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field


class DatasetInfo(BaseModel):
    id: int
    name: str
    url: str
    row_count: int
    is_active: bool
    uploaded_by: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


ResultStatus = Literal["success", "error", "not_configured"]


class UploadResult(BaseModel):
    status: ResultStatus
    message: str
    members_added: int = 0
    dataset_id: Optional[int] = None
    missing_headers: List[str] = Field(default_factory=list)


class DatasetActionResult(BaseModel):
    status: ResultStatus
    message: str
    dataset_id: Optional[int] = None
    members: int = 0


class UploadHistoryResponse(BaseModel):
    id: int
    user_id: Optional[uuid.UUID]
    user_email: Optional[str]
    file_name: Optional[str]
    records_count: int
    status: str
    error_message: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
