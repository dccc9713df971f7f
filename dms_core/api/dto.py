"""
Data Transfer Objects (DTOs) for the backend contract.
Both backends accept and return these models, which is what keeps the
mock and the real implementation interchangeable.
"""
from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def _iso_date(value: Any) -> Any:
    """Accept date/datetime objects wherever an ISO date string is expected."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


IsoDate = Annotated[str, BeforeValidator(_iso_date)]
OptionalIsoDate = Annotated[Optional[str], BeforeValidator(_iso_date)]


class Tag(BaseModel):
    """Free-form document label; identity is the case-insensitive name."""
    tag_name: str

    @property
    def key(self) -> str:
        return self.tag_name.strip().lower()


class DocumentFile(BaseModel):
    """File descriptor attached to a document (absent for metadata-only entries)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    name: str = ""
    type: str = ""
    size: int = 0
    uri: Optional[str] = None
    url: Optional[str] = None
    local_path: Optional[str] = Field(default=None, alias="localPath")
    managed_file: bool = Field(default=False, alias="managedFile")


class Document(BaseModel):
    """Document DTO - one uploaded file plus its descriptive metadata."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    major_head: str = ""
    minor_head: str = ""
    document_date: str = ""
    document_remarks: str = ""
    tags: List[Tag] = Field(default_factory=list)
    file: Optional[DocumentFile] = None
    uploaded_at: Optional[str] = Field(default=None, alias="uploadedAt")
    uploaded_by: Optional[str] = Field(default=None, alias="uploadedBy")

    @model_validator(mode="before")
    @classmethod
    def _normalize_remote_shape(cls, data: Any) -> Any:
        """
        The remote service returns a flat shape (file_name, file_size,
        file_url, numeric ids, null strings); the mock ledger stores a nested
        one. Fold both into the same model.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("id") is not None:
            data["id"] = str(data["id"])
        for key in ("major_head", "minor_head", "document_remarks"):
            if data.get(key) is None:
                data[key] = ""
        data["document_date"] = _iso_date(data.get("document_date")) or ""
        tags = data.get("tags") or []
        data["tags"] = [{"tag_name": t} if isinstance(t, str) else t for t in tags]
        if not data.get("file") and data.get("file_name"):
            from ..utils.document_utils import mime_type_from_extension
            data["file"] = {
                "name": data["file_name"],
                "size": data.get("file_size") or 0,
                "type": data.get("file_type") or mime_type_from_extension(data["file_name"]),
                "url": data.get("file_url"),
            }
        return data

    @property
    def has_local_file(self) -> bool:
        return bool(self.file and self.file.local_path)

    @property
    def can_preview_locally(self) -> bool:
        from ..utils.validators import is_previewable
        return self.has_local_file and is_previewable(self.file.type)

    def to_record(self) -> Dict[str, Any]:
        """Serialise with the wire/ledger field names (uploadedAt, localPath, ...)."""
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------- auth

class OTPGenerateRequest(BaseModel):
    mobile_number: str


class OTPGenerateResponse(BaseModel):
    success: bool
    message: str = ""
    otp: Optional[str] = None


class OTPValidateRequest(BaseModel):
    mobile_number: str
    otp: str


class OTPValidateResponse(BaseModel):
    success: bool
    token: Optional[str] = None
    message: str = ""


# ---------------------------------------------------------------- documents

class DocumentUploadData(BaseModel):
    """Metadata sent alongside an uploaded file."""
    major_head: str
    minor_head: str
    document_date: IsoDate
    document_remarks: str = ""
    tags: List[Tag] = Field(default_factory=list)
    user_id: str = ""


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str = ""
    document_id: str = Field(alias="documentId")
    document: Optional[Document] = None
    # Only set by the mock backend: whether the binary landed in managed storage
    managed_file_saved: Optional[bool] = None
    local_path: Optional[str] = None


class SearchValue(BaseModel):
    value: str = ""


class DocumentSearchRequest(BaseModel):
    """Server/mock-side search filters; every field is optional."""
    major_head: Optional[str] = None
    minor_head: Optional[str] = None
    from_date: OptionalIsoDate = None
    to_date: OptionalIsoDate = None
    tags: Optional[List[Tag]] = None
    uploaded_by: Optional[str] = None
    search: Optional[SearchValue] = None
    start: Optional[int] = None
    length: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DocumentSearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: List[Document] = Field(default_factory=list)
    records_total: int = Field(default=0, alias="recordsTotal")
    records_filtered: int = Field(default=0, alias="recordsFiltered")


class DocumentTagsRequest(BaseModel):
    term: str = ""


class DocumentTagsResponse(BaseModel):
    success: bool = True
    data: List[Tag] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str = ""
    document_id: str = Field(alias="documentId")


class UploadStatusResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    upload_id: str = ""
    status: str = ""
    progress: int = 0


class FileValidationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(alias="isValid")
    error: Optional[str] = None


# ---------------------------------------------------------------- mock maintenance

class StorageInfoResponse(BaseModel):
    success: bool = True
    storage: Dict[str, int]
    documents_count: int
    formatted_sizes: Dict[str, str]


class CleanupResponse(BaseModel):
    success: bool = True
    message: str
    deleted_count: int
