"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Cross-platform file operations used by disposal: trash, quarantine moves, directories.
Nothing here deletes permanently; duplicates go to the system trash via send2trash.
"""
import os
import shutil
from pathlib import Path
from send2trash import send2trash


class FileService:
    """
    File system side effects of the unduplicator.
    Uses universal system tools with proper error handling.
    """

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise RuntimeError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def ensure_directory(directory: str) -> Path:
        """Creates the directory (and parents) if absent."""
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def move_without_overwrite(source: str, destination: str) -> None:
        """
        Moves a file; refuses to replace an existing destination.
        The destination name is claimed atomically: a hard link where the file system
        supports one, otherwise an exclusively created placeholder that the move replaces.
        A destination appearing concurrently makes this raise FileExistsError.
        """
        if not os.path.isfile(source):
            raise FileNotFoundError(f"File not found: {source}")

        try:
            os.link(source, destination)
        except FileExistsError:
            raise FileExistsError(f"Destination already exists: {destination}") from None
        except OSError:
            # no hard links here (other device, FAT, ...)
            FileService._move_into_placeholder(source, destination)
            return

        try:
            os.unlink(source)
        except OSError:
            os.unlink(destination)
            raise

    @staticmethod
    def _move_into_placeholder(source: str, destination: str) -> None:
        try:
            fd = os.open(destination, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            raise FileExistsError(f"Destination already exists: {destination}") from None
        os.close(fd)

        try:
            shutil.move(source, destination)
        except OSError:
            os.unlink(destination)
            raise

    @staticmethod
    def file_size(file_path: str) -> int:
        try:
            return os.path.getsize(file_path)
        except OSError:
            return 0
