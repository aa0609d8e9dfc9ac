import os
from pathlib import Path
from typing import List, Optional, Tuple
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from fileshare.files.naming import stored_name_for, original_name_of, iso_from_timestamp
from fileshare.files.schemas import FileOut
from fileshare.shared.logs import get_logger

log = get_logger("storage")

CHUNK = 1024 * 1024

class FileTooLarge(ValueError):
    pass

class FileStore:
    """
    One flat directory of uploaded files. The filename is the only metadata:
    see naming.stored_name_for. Created on construction if missing.
    """

    def __init__(self, root: Path, max_bytes: int):
        self.root = Path(root)
        self.max_bytes = max_bytes
        self.root.mkdir(parents=True, exist_ok=True)

    def _too_large(self) -> FileTooLarge:
        return FileTooLarge(f"File too large. Max {self.max_bytes} bytes")

    async def save(self, file: UploadFile) -> Tuple[str, int]:
        """
        Write the upload under a generated stored name and return (stored_name, size).
        Raises FileTooLarge (nothing left on disk) or OSError (partial file removed).
        """
        # starlette spools the part before the route runs, so the size is usually known
        if file.size is not None and file.size > self.max_bytes:
            raise self._too_large()

        stored = stored_name_for(file.filename or "upload.bin")
        target = self.root / stored
        size = 0
        try:
            out = await run_in_threadpool(target.open, "wb")
            try:
                while True:
                    chunk = await file.read(CHUNK)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise self._too_large()
                    await run_in_threadpool(out.write, chunk)
            finally:
                await run_in_threadpool(out.close)
        except (FileTooLarge, OSError):
            target.unlink(missing_ok=True)
            raise
        finally:
            await file.close()
        return stored, size

    def list_files(self) -> List[FileOut]:
        rows: List[Tuple[float, FileOut]] = []
        with os.scandir(self.root) as it:
            for entry in it:
                if not entry.is_file():
                    continue
                try:
                    st = entry.stat()
                except FileNotFoundError:
                    # removed between scandir and stat
                    continue
                rows.append((st.st_mtime, FileOut(
                    filename=entry.name,
                    originalname=original_name_of(entry.name),
                    size=st.st_size,
                    uploadDate=iso_from_timestamp(st.st_mtime),
                )))
        # stable sort: equal mtimes keep directory order
        rows.sort(key=lambda r: r[0], reverse=True)
        return [f for _, f in rows]

    def resolve(self, name: str) -> Optional[Path]:
        """Path of a stored file directly inside the root, or None."""
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            return None
        path = self.root / name
        if not path.is_file():
            return None
        return path

    def delete(self, name: str) -> bool:
        path = self.resolve(name)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            # lost a race with another delete
            return False
        return True
