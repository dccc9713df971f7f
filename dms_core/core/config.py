import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables (only in development)
# In packaged builds, environment variables are set directly
if os.getenv("ENVIRONMENT") != "production":
    load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Remote service
API_BASE_URL = os.getenv("API_BASE_URL", "")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))  # seconds
UPLOAD_TIMEOUT = float(os.getenv("UPLOAD_TIMEOUT", "30"))  # seconds

# Mock API
MOCK_API_ENABLED = os.getenv("MOCK_API_ENABLED", "true").lower() == "true"
MOCK_STATIC_OTP = os.getenv("MOCK_STATIC_OTP", "123456")
MOCK_TOKEN = os.getenv("MOCK_TOKEN", "mock_token_12345")
MOCK_DELAY_MS = int(os.getenv("MOCK_DELAY_MS", "1000"))

# Mock ledger storage - Options: 'json', 'memory'
MOCK_STORAGE_TYPE = os.getenv("MOCK_STORAGE_TYPE", "json")
MOCK_DB_DIR = Path(os.getenv("MOCK_DB_DIR", str(BASE_DIR / "data" / "mock_db")))

# Local file storage roots (DMSDocuments, DMSTemp, DMSCache live under this)
STORAGE_DIR = Path(os.getenv("DMS_STORAGE_DIR", str(BASE_DIR / "storage")))
DOWNLOAD_DIR = Path(os.getenv("DMS_DOWNLOAD_DIR", str(STORAGE_DIR / "Downloads")))

# Upload limits
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", "50"))
MAX_FILE_SIZE = MAX_FILE_SIZE_MB * 1024 * 1024


@dataclass
class BackendConfig:
    """
    Runtime configuration injected into the backend switcher and backends.

    Built once at startup (usually with from_env()); mock_enabled is the only
    field expected to change afterwards, and only through the switcher.
    """
    base_url: str = ""
    mock_enabled: bool = True
    static_otp: str = "123456"
    mock_token: str = "mock_token_12345"
    mock_delay_ms: int = 1000
    request_timeout: float = 10.0
    upload_timeout: float = 30.0
    storage_dir: Path = field(default_factory=lambda: BASE_DIR / "storage")
    download_dir: Optional[Path] = None
    mock_storage_type: str = "memory"
    mock_db_dir: Optional[Path] = None

    def __post_init__(self):
        self.storage_dir = Path(self.storage_dir)
        if self.download_dir is None:
            self.download_dir = self.storage_dir / "Downloads"
        else:
            self.download_dir = Path(self.download_dir)
        if self.mock_db_dir is not None:
            self.mock_db_dir = Path(self.mock_db_dir)

    @classmethod
    def from_env(cls) -> "BackendConfig":
        """Snapshot the environment-derived settings above."""
        return cls(
            base_url=API_BASE_URL,
            mock_enabled=MOCK_API_ENABLED,
            static_otp=MOCK_STATIC_OTP,
            mock_token=MOCK_TOKEN,
            mock_delay_ms=MOCK_DELAY_MS,
            request_timeout=REQUEST_TIMEOUT,
            upload_timeout=UPLOAD_TIMEOUT,
            storage_dir=STORAGE_DIR,
            download_dir=DOWNLOAD_DIR,
            mock_storage_type=MOCK_STORAGE_TYPE,
            mock_db_dir=MOCK_DB_DIR,
        )
