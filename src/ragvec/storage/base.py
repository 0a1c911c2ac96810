from abc import ABC, abstractmethod
from pathlib import Path


class FileStorage(ABC):
    @abstractmethod
    async def save(self, file_content: bytes, filename: str, subdir: str = "") -> str:
        """Save an uploaded file and return its path relative to the storage root."""
        ...

    @abstractmethod
    async def retrieve(self, file_path: str) -> Path:
        """Return the absolute Path of a stored upload."""
        ...

    @abstractmethod
    async def delete(self, file_path: str) -> None:
        """Remove a stored upload once it has been ingested."""
        ...
