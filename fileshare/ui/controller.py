import asyncio
import contextlib
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

import httpx
from pydantic import BaseModel

from fileshare.files.schemas import FileOut
from fileshare.shared.logs import get_logger
from fileshare.ui.client import FileShareClient

log = get_logger("ui")

POLL_INTERVAL = 30.0   # seconds between health probes
BANNER_SECONDS = 3.0   # success banners clear themselves after this

CONNECT_ERROR = "Cannot connect to server. Make sure backend is running."

class ViewState(BaseModel):
    connected: bool = False
    files: list[FileOut] = []
    loading: bool = False
    uploading: bool = False
    upload_progress: int = 0
    error: Optional[str] = None
    success_message: Optional[str] = None

class FileShareController:
    """
    State and actions behind the single file-share view.

    Use as `async with FileShareController(client) as ui:`; entering probes the
    server, loads the listing and starts the liveness poller, leaving stops it.
    """

    def __init__(
        self,
        client: FileShareClient,
        poll_interval: float = POLL_INTERVAL,
        banner_seconds: float = BANNER_SECONDS,
        on_change: Optional[Callable[[ViewState], None]] = None,
    ):
        self.client = client
        self.poll_interval = poll_interval
        self.banner_seconds = banner_seconds
        self.on_change = on_change
        self.state = ViewState()
        self._poller: Optional[asyncio.Task] = None
        self._banner_timer: Optional[asyncio.TimerHandle] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, *exc):
        await self.stop()

    def _changed(self):
        if self.on_change:
            self.on_change(self.state)

    # ---- lifetime ----

    async def start(self):
        await self._probe_and_refresh()
        self._poller = asyncio.create_task(self._poll())

    async def stop(self):
        if self._poller:
            self._poller.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poller
            self._poller = None
        if self._banner_timer:
            self._banner_timer.cancel()
            self._banner_timer = None

    async def _poll(self):
        while True:
            await asyncio.sleep(self.poll_interval)
            await self._probe_and_refresh()

    async def _probe_and_refresh(self):
        # a failed probe leaves the last listing on screen
        if await self.check_connection():
            await self.fetch_files()

    # ---- banners ----

    def show_success(self, message: str):
        if self._banner_timer:
            self._banner_timer.cancel()
        self.state.success_message = message
        self._banner_timer = asyncio.get_running_loop().call_later(self.banner_seconds, self._clear_success)
        self._changed()

    def _clear_success(self):
        self.state.success_message = None
        self._banner_timer = None
        self._changed()

    def _fail(self, message: str, exc: Exception):
        log.warning("%s: %s", message, exc)
        self.state.error = message
        self._changed()

    # ---- actions ----

    async def check_connection(self) -> bool:
        try:
            await self.client.health()
        except (httpx.HTTPError, ValueError) as e:
            self.state.connected = False
            self._fail(CONNECT_ERROR, e)
            return False
        self.state.connected = True
        self.state.error = None
        self._changed()
        return True

    async def fetch_files(self):
        self.state.loading = True
        self._changed()
        try:
            rows = await self.client.list_files()
            self.state.files = [FileOut(**row) for row in rows]
            self.state.error = None
        except (httpx.HTTPError, ValueError) as e:
            self._fail("Failed to load files", e)
        finally:
            self.state.loading = False
            self._changed()

    async def refresh(self):
        await self.check_connection()
        await self.fetch_files()

    def _on_progress(self, sent: int, total: int):
        self.state.upload_progress = round(sent / total * 100) if total else 100
        self._changed()

    async def upload(self, path: Path) -> bool:
        """Upload one file. Refused (returns False) while another upload is running."""
        if self.state.uploading:
            return False
        path = Path(path)
        self.state.uploading = True
        self.state.upload_progress = 0
        self.state.error = None
        self._changed()
        try:
            await self.client.upload(path, on_progress=self._on_progress)
        except (httpx.HTTPError, ValueError, OSError) as e:
            self.state.uploading = False
            self.state.upload_progress = 0
            self._fail("Failed to upload file", e)
            return False
        self.state.upload_progress = 100
        self.show_success(f'"{path.name}" uploaded!')
        await self.fetch_files()
        self.state.uploading = False
        self.state.upload_progress = 0
        self._changed()
        return True

    async def download(self, filename: str, originalname: str, dest_dir: Path) -> Optional[Path]:
        """Save a stored file into dest_dir under its original name."""
        dest_dir = Path(dest_dir)
        target = dest_dir / Path(originalname).name
        tmp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(dir=dest_dir, prefix=".download-", delete=False) as tmp:
                tmp_path = Path(tmp.name)
                await self.client.download_to(filename, tmp)
            os.replace(tmp_path, target)
        except (httpx.HTTPError, OSError) as e:
            if tmp_path:
                tmp_path.unlink(missing_ok=True)
            self._fail("Failed to download", e)
            return None
        self.show_success(f'Downloading "{originalname}"')
        return target

    async def delete(self, filename: str, originalname: str, confirm: Callable[[str], bool]) -> bool:
        if not confirm(f'Delete "{originalname}"?'):
            return False
        try:
            await self.client.delete(filename)
        except (httpx.HTTPError, ValueError) as e:
            self._fail("Failed to delete", e)
            return False
        self.show_success(f'"{originalname}" deleted!')
        await self.fetch_files()
        return True
