import os
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional
from urllib.parse import quote

import httpx

ProgressFn = Callable[[int, int], None]  # (bytes sent, total bytes)

class _ProgressReader:
    """File wrapper that reports every read httpx makes while rendering the multipart body."""

    def __init__(self, fh: BinaryIO, on_progress: ProgressFn):
        self._fh = fh
        self._on_progress = on_progress
        self.total = os.fstat(fh.fileno()).st_size
        self.sent = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._fh.read(size)
        if chunk:
            self.sent += len(chunk)
            self._on_progress(self.sent, self.total)
        return chunk

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        pos = self._fh.seek(offset, whence)
        if pos == 0:
            self.sent = 0
        return pos

    def tell(self) -> int:
        return self._fh.tell()

    def fileno(self) -> int:
        return self._fh.fileno()

class FileShareClient:
    """Thin async wrapper over the gateway's HTTP surface. Raises httpx.HTTPError on any failure."""

    def __init__(self, base_url: str = "http://localhost:3001/api", http: Optional[httpx.AsyncClient] = None):
        self.http = http or httpx.AsyncClient(base_url=base_url, timeout=None)

    async def aclose(self):
        await self.http.aclose()

    async def health(self) -> dict[str, Any]:
        r = await self.http.get("/health")
        r.raise_for_status()
        return r.json()

    async def list_files(self) -> list[dict[str, Any]]:
        r = await self.http.get("/files")
        r.raise_for_status()
        data = r.json()
        return data if isinstance(data, list) else []

    async def upload(self, path: Path, on_progress: Optional[ProgressFn] = None) -> dict[str, Any]:
        path = Path(path)
        with path.open("rb") as fh:
            body = _ProgressReader(fh, on_progress) if on_progress else fh
            r = await self.http.post("/upload", files={"file": (path.name, body)})
        r.raise_for_status()
        return r.json()

    async def download_to(self, filename: str, out: BinaryIO) -> int:
        written = 0
        async with self.http.stream("GET", f"/download/{quote(filename, safe='')}") as r:
            r.raise_for_status()
            async for chunk in r.aiter_bytes():
                out.write(chunk)
                written += len(chunk)
        return written

    async def delete(self, filename: str) -> dict[str, Any]:
        r = await self.http.delete(f"/files/{quote(filename, safe='')}")
        r.raise_for_status()
        return r.json()
