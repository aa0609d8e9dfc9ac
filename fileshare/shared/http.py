from fastapi import HTTPException
from typing import Any, Optional

def ok(data: Any = None, **extra):
    return {"success": True, **({"data": data} if data is not None else {}), **extra}

def err(message: str, code: str = "bad_request", status: int = 400, details: Optional[Any] = None):
    # always raises; routes short-circuit on the first failure
    raise HTTPException(status_code=status, detail={"ok": False, "error": {"code": code, "message": message, "details": details}})

def not_found(message: str = "Not found"):
    err(message, code="not_found", status=404)

def internal(message: str, details: Optional[Any] = None):
    err(message, code="internal", status=500, details=details)
