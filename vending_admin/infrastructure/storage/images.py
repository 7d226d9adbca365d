# caminho: vending_admin/infrastructure/storage/images.py
# Funções:
# - ImageStorage: contrato de armazenamento de imagens de máquinas
# - LocalImageStorage: grava em MEDIA_ROOT e publica sob MEDIA_BASE_URL

from __future__ import annotations

import asyncio
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(slots=True, frozen=True)
class StoredImage:
    storage_path: str
    public_url: str
    size: int


class ImageStorage(Protocol):
    async def save(self, *, folder: str, content: bytes, content_type: str) -> StoredImage: ...
    async def delete(self, storage_path: str) -> None: ...


class LocalImageStorage:
    def __init__(self, root: str | Path, base_url: str) -> None:
        self._root = Path(root).resolve()
        self._base_url = base_url.rstrip('/')

    async def save(self, *, folder: str, content: bytes, content_type: str) -> StoredImage:
        extension = mimetypes.guess_extension(content_type) or '.bin'
        relative = Path('machines') / folder / f'{uuid.uuid4().hex}{extension}'
        target = self._root / relative
        await asyncio.to_thread(self._write, target, content)
        return StoredImage(
            storage_path=relative.as_posix(),
            public_url=f'{self._base_url}/{relative.as_posix()}',
            size=len(content),
        )

    async def delete(self, storage_path: str) -> None:
        target = (self._root / storage_path).resolve()
        if self._root not in target.parents:
            raise ValueError('Storage path escapes media root')
        await asyncio.to_thread(target.unlink, missing_ok=True)

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
