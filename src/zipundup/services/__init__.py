from .file_service import FileService
from .disposal_service import DisposalService

__all__ = ["FileService", "DisposalService"]
