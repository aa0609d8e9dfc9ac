from pydantic import BaseModel

class FileOut(BaseModel):
    filename: str       # stored name, the identifier
    originalname: str
    size: int
    uploadDate: str     # ISO-8601 UTC

class UploadOut(FileOut):
    success: bool = True

class DeleteOut(BaseModel):
    success: bool = True

class HealthOut(BaseModel):
    status: str = "ok"
    timestamp: str
