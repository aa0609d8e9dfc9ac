from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile

from fileshare.files.naming import original_name_of, iso_utc
from fileshare.files.schemas import FileOut, UploadOut, DeleteOut, HealthOut
from fileshare.files.storage import FileStore, FileTooLarge
from fileshare.shared.http import ok, err, not_found, internal
from fileshare.shared.logs import get_logger

router = APIRouter(tags=["Files"])
log = get_logger("api")

def get_store(request: Request) -> FileStore:
    return request.app.state.store

@router.get("/health", response_model=HealthOut, tags=["Health"])
def health():
    return {"status": "ok", "timestamp": iso_utc()}

@router.post("/upload", response_model=UploadOut)
async def upload_file(request: Request, store: FileStore = Depends(get_store)):
    # read the form here so a text field named "file" is a 400, not a 422
    form = await request.form()
    file = form.get("file")
    if not isinstance(file, UploadFile) or not file.filename:
        err("No file", code="no_file")
    try:
        stored, size = await store.save(file)
    except FileTooLarge as e:
        err(str(e), code="too_large", status=413)
    except OSError:
        log.exception("upload of %r failed", file.filename)
        internal("Upload failed")
    log.info("Uploaded: %s (%d bytes) as %s", file.filename, size, stored)
    return {
        "success": True,
        "filename": stored,
        "originalname": file.filename,
        "size": size,
        "uploadDate": iso_utc(),
    }

@router.get("/files", response_model=list[FileOut])
def list_files(store: FileStore = Depends(get_store)):
    try:
        return store.list_files()
    except OSError:
        log.exception("listing %s failed", store.root)
        internal("Failed to read files")

@router.get("/download/{filename}")
def download_file(filename: str, store: FileStore = Depends(get_store)):
    path = store.resolve(filename)
    if path is None:
        not_found()
    # suggested save name is the recovered original, not the stored name
    return FileResponse(
        path=path,
        media_type="application/octet-stream",
        filename=original_name_of(filename),
    )

@router.delete("/files/{filename}", response_model=DeleteOut)
def delete_file(filename: str, store: FileStore = Depends(get_store)):
    try:
        removed = store.delete(filename)
    except OSError:
        log.exception("delete of %s failed", filename)
        internal("Delete failed")
    if not removed:
        not_found()
    log.info("Deleted: %s", filename)
    return ok()
