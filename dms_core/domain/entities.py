"""
Domain entities - Local objects owned by the client core.
These represent files on the device and the signed-in user, not API payloads.
"""
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Dict, Any

from .value_objects import FileId, FilePath


@dataclass
class FileInfo:
    """
    Raw file tuple handed over by a picker, camera or gallery integration.
    The uri is only guaranteed to be valid for a short time.
    """
    uri: str
    name: str
    type: str = ""
    size: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileInfo":
        return cls(
            uri=data.get("uri") or "",
            name=data.get("name") or "",
            type=data.get("type") or "",
            size=data.get("size"),
        )


@dataclass
class ManagedFile:
    """
    ManagedFile entity - a file copied into the app's own storage tree.
    """
    id: FileId
    original_uri: str
    local_path: FilePath
    name: str
    type: str
    size: int
    created_at: str
    is_temporary: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FileStat:
    """Result of stat-ing a path under FileManager."""
    path: str
    name: str
    size: int
    modified_at: datetime
    is_file: bool
    is_directory: bool


@dataclass
class StorageInfo:
    """Byte totals per storage root."""
    documents_size: int = 0
    temp_size: int = 0
    cache_size: int = 0

    @property
    def total_size(self) -> int:
        return self.documents_size + self.temp_size + self.cache_size

    def to_dict(self) -> Dict[str, int]:
        return {
            "documentsSize": self.documents_size,
            "tempSize": self.temp_size,
            "cacheSize": self.cache_size,
            "totalSize": self.total_size,
        }


@dataclass
class UserData:
    """The signed-in user as returned by a successful OTP validation."""
    mobile_number: str
    token: str
