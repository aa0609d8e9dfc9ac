from pathlib import Path
from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()

# bundled single-page UI, served when ENV=production
UI_STATIC_DIR = Path(__file__).resolve().parents[1] / "ui" / "static"

class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "development")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3001"))
    API_PREFIX: str = os.getenv("API_PREFIX", "/api")

    # storage
    UPLOAD_DIR: Path = Path(os.getenv("UPLOAD_DIR", "uploads"))
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(500 * 1024 * 1024)))  # 500 MiB

    # dev frontend (vite) allowed through CORS outside production
    DEV_ORIGIN: str = os.getenv("DEV_ORIGIN", "http://localhost:5173")
    STATIC_DIR: Path = Path(os.getenv("STATIC_DIR", str(UI_STATIC_DIR)))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

settings = Settings()
