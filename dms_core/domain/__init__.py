from .entities import FileInfo, FileStat, ManagedFile, StorageInfo, UserData
from .value_objects import FileCategory, StorageRoot

__all__ = [
    "FileInfo",
    "FileStat",
    "ManagedFile",
    "StorageInfo",
    "UserData",
    "FileCategory",
    "StorageRoot",
]
