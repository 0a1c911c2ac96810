import asyncio
from pathlib import Path

from ragvec.storage.base import FileStorage


class LocalFileStorage(FileStorage):
    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _resolve(self, file_path: str) -> Path:
        abs_path = (self.base_dir / file_path).resolve()
        if not abs_path.is_relative_to(self.base_dir):
            raise ValueError(f"Path escapes upload directory: {file_path}")
        return abs_path

    async def save(self, file_content: bytes, filename: str, subdir: str = "") -> str:
        relative = str(Path(subdir) / filename) if subdir else filename
        file_path = self._resolve(relative)
        await asyncio.to_thread(file_path.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(file_path.write_bytes, file_content)
        return relative

    async def retrieve(self, file_path: str) -> Path:
        abs_path = self._resolve(file_path)
        if not await asyncio.to_thread(abs_path.exists):
            raise FileNotFoundError(f"File not found: {file_path}")
        return abs_path

    async def delete(self, file_path: str) -> None:
        abs_path = self._resolve(file_path)
        if await asyncio.to_thread(abs_path.exists):
            await asyncio.to_thread(abs_path.unlink)
