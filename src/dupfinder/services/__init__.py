from .duplicate_service import DuplicateService
from .file_service import DirectoryTrash, FileService, SystemTrash
from .removal_service import RemovalManager

__all__ = ["DuplicateService", "FileService", "SystemTrash", "DirectoryTrash", "RemovalManager"]
