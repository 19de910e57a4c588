"""File-backed storage: one UTF-8 document per key inside a directory.

Keys are percent-encoded into file names, so distinct keys always map to
distinct files. Writes go to a temporary file that is then renamed over the
target, which makes every ``set`` a full, atomic replace.
"""
import uuid
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import quote, unquote

import aiofiles
import aiofiles.os

from webcrawl_chat.core.base import BaseStorage

SUFFIX = ".json"


class FileStorage(BaseStorage):

    def __init__(self, directory: Union[str, Path], name: str = "file"):
        super().__init__(name, {"directory": str(directory)})
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}{SUFFIX}"

    async def _get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not await aiofiles.os.path.exists(path):
            return None
        async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
            return await f.read()

    async def _set(self, key: str, value: str) -> None:
        await aiofiles.os.makedirs(self.directory, exist_ok=True)
        path = self._path_for(key)
        tmp_path = self.directory / f".{path.name}.{uuid.uuid4().hex}.tmp"
        try:
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(value)
            await aiofiles.os.replace(tmp_path, path)
        except Exception:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise
        self.logger.debug(f"Wrote {len(value)} characters to {path}")

    async def _list_keys(self, prefix: str) -> List[str]:
        if not await aiofiles.os.path.isdir(self.directory):
            return []
        keys = []
        for filename in await aiofiles.os.listdir(self.directory):
            if filename.startswith(".") or not filename.endswith(SUFFIX):
                continue
            key = unquote(filename[: -len(SUFFIX)])
            if key.startswith(prefix):
                keys.append(key)
        return keys
