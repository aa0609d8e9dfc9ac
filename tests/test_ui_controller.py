import anyio
import httpx
import pytest

from fileshare.files.schemas import FileOut
from fileshare.ui.client import FileShareClient
from fileshare.ui.controller import FileShareController, CONNECT_ERROR

pytestmark = pytest.mark.anyio

def _client(app) -> FileShareClient:
    return FileShareClient(http=httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test/api"))

def _down_client(calls: list | None = None) -> FileShareClient:
    def handler(request: httpx.Request):
        if calls is not None:
            calls.append(request.url.path)
        raise httpx.ConnectError("connection refused", request=request)
    return FileShareClient(http=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test/api"))

async def test_start_probes_and_loads_listing(app, upload_dir):
    (upload_dir / "1700000000000-1-seed.txt").write_bytes(b"seed")
    async with FileShareController(_client(app)) as ui:
        assert ui.state.connected is True
        assert ui.state.error is None
        assert [f.originalname for f in ui.state.files] == ["seed.txt"]

async def test_upload_tracks_progress_and_refreshes(app, tmp_path):
    src = tmp_path / "hello.txt"
    src.write_bytes(b"hello there")
    progress = []
    ui = FileShareController(_client(app), on_change=lambda s: progress.append(s.upload_progress))

    assert await ui.upload(src) is True
    assert 100 in progress
    assert ui.state.success_message == '"hello.txt" uploaded!'
    assert ui.state.uploading is False and ui.state.upload_progress == 0
    assert [(f.originalname, f.size) for f in ui.state.files] == [("hello.txt", 11)]
    await ui.stop()

async def test_upload_failure_keeps_listing(app, tmp_path):
    big = tmp_path / "big.bin"
    big.write_bytes(b"x" * 4096)  # over the 1 KiB test limit
    ui = FileShareController(_client(app))
    await ui.fetch_files()

    assert await ui.upload(big) is False
    assert ui.state.error == "Failed to upload file"
    assert ui.state.uploading is False
    assert ui.state.success_message is None
    assert ui.state.files == []

async def test_only_one_upload_at_a_time(app, tmp_path):
    src = tmp_path / "a.txt"
    src.write_bytes(b"a")
    ui = FileShareController(_client(app))
    ui.state.uploading = True
    assert await ui.upload(src) is False
    assert list(app.state.store.root.iterdir()) == []

async def test_download_saves_under_original_name(app, upload_dir, tmp_path):
    (upload_dir / "1700000000000-7-report.pdf").write_bytes(b"%PDF-1.4")
    dest = tmp_path / "downloads"
    dest.mkdir()
    ui = FileShareController(_client(app))

    saved = await ui.download("1700000000000-7-report.pdf", "report.pdf", dest)
    assert saved == dest / "report.pdf"
    assert saved.read_bytes() == b"%PDF-1.4"
    assert [p.name for p in dest.iterdir()] == ["report.pdf"]
    assert ui.state.success_message == 'Downloading "report.pdf"'
    await ui.stop()

async def test_download_failure_leaves_nothing_behind(app, tmp_path):
    dest = tmp_path / "downloads"
    dest.mkdir()
    ui = FileShareController(_client(app))
    assert await ui.download("1-2-missing.txt", "missing.txt", dest) is None
    assert ui.state.error == "Failed to download"
    assert list(dest.iterdir()) == []

async def test_delete_requires_confirmation(app, upload_dir):
    stored = "1700000000000-3-old.txt"
    (upload_dir / stored).write_bytes(b"old")
    ui = FileShareController(_client(app))
    prompts = []

    def decline(msg):
        prompts.append(msg)
        return False

    assert await ui.delete(stored, "old.txt", decline) is False
    assert prompts == ['Delete "old.txt"?']
    assert (upload_dir / stored).exists()

    assert await ui.delete(stored, "old.txt", lambda msg: True) is True
    assert not (upload_dir / stored).exists()
    assert ui.state.files == []
    assert ui.state.success_message == '"old.txt" deleted!'
    await ui.stop()

async def test_delete_missing_reports_error(app):
    ui = FileShareController(_client(app))
    assert await ui.delete("1-2-gone.txt", "gone.txt", lambda msg: True) is False
    assert ui.state.error == "Failed to delete"

async def test_disconnect_keeps_stale_listing(app, upload_dir):
    (upload_dir / "1700000000000-1-seed.txt").write_bytes(b"seed")
    ui = FileShareController(_client(app))
    await ui.start()
    await ui.stop()
    assert len(ui.state.files) == 1

    ui.client = _down_client()
    assert await ui.check_connection() is False
    assert ui.state.connected is False
    assert ui.state.error == CONNECT_ERROR
    assert len(ui.state.files) == 1

async def test_success_banner_clears_itself(app):
    ui = FileShareController(_client(app), banner_seconds=0.05)
    ui.show_success("done")
    assert ui.state.success_message == "done"
    await anyio.sleep(0.2)
    assert ui.state.success_message is None

async def test_poller_repeats_until_stopped():
    calls = []
    ui = FileShareController(_down_client(calls), poll_interval=0.02)
    await ui.start()
    await anyio.sleep(0.15)
    await ui.stop()
    seen = len(calls)
    assert seen >= 3
    assert all(path == "/api/health" for path in calls)  # files are never fetched while down

    await anyio.sleep(0.1)
    assert len(calls) == seen

def _html_client(calls: list | None = None) -> FileShareClient:
    # what a production server answers when the base URL is missing /api
    def handler(request: httpx.Request):
        if calls is not None:
            calls.append(request.url.path)
        return httpx.Response(200, text="<html>ui</html>", headers={"content-type": "text/html"})
    return FileShareClient(http=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test"))

async def test_non_json_health_reads_as_disconnected():
    ui = FileShareController(_html_client())
    await ui.start()
    await ui.stop()
    assert ui.state.connected is False
    assert ui.state.error == CONNECT_ERROR

async def test_poller_survives_non_json_responses():
    calls = []
    ui = FileShareController(_html_client(calls), poll_interval=0.02)
    await ui.start()
    await anyio.sleep(0.15)
    assert not ui._poller.done()
    await ui.stop()
    assert len(calls) >= 3

async def test_malformed_listing_keeps_previous_files():
    def handler(request: httpx.Request):
        if request.url.path.endswith("/health"):
            return httpx.Response(200, json={"status": "ok", "timestamp": "2025-01-01T00:00:00.000Z"})
        return httpx.Response(200, json=[{"name": "no-such-shape"}])
    ui = FileShareController(FileShareClient(http=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test/api")))
    ui.state.files = [FileOut(filename="1-2-kept.txt", originalname="kept.txt", size=1, uploadDate="2025-01-01T00:00:00.000Z")]
    await ui.start()
    await ui.stop()
    assert ui.state.connected is True
    assert ui.state.error == "Failed to load files"
    assert [f.originalname for f in ui.state.files] == ["kept.txt"] and ui.state.loading is False

async def test_delete_with_non_json_reply_reports_error():
    ui = FileShareController(_html_client())
    assert await ui.delete("1-2-a.txt", "a.txt", lambda msg: True) is False
    assert ui.state.error == "Failed to delete"
