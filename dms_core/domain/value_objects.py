"""
Value Objects - Immutable objects that represent domain concepts.
These have no identity and are compared by value.
"""
from enum import Enum
from typing import NewType

# Value objects for type safety and domain clarity
FileId = NewType("FileId", str)
FilePath = NewType("FilePath", str)


class StorageRoot(str, Enum):
    """The three local storage roots managed by FileManager."""
    DOCUMENTS = "documents"
    TEMP = "temp"
    CACHE = "cache"


class FileCategory(str, Enum):
    """Sub-directory of the permanent store a file is filed under."""
    DOCUMENTS = "documents"
    IMAGES = "images"

    @classmethod
    def for_mime_type(cls, mime_type: str) -> "FileCategory":
        """Images go under images/, everything else under documents/."""
        if mime_type and mime_type.lower().startswith("image/"):
            return cls.IMAGES
        return cls.DOCUMENTS
