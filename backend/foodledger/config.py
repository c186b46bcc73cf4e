"""Application configuration"""
import os
from typing import List, Optional
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def get_project_root() -> Path:
    """Return the repository root (the parent of backend/)"""
    # backend/foodledger/config.py -> backend/foodledger -> backend -> project root
    config_path = Path(__file__).resolve()
    package_dir = config_path.parent
    backend = package_dir.parent
    return backend.parent


def get_log_dir() -> str:
    """Return the log directory, creating it when missing"""
    log_dir = Path(os.getenv("LOG_DIR", str(get_project_root() / "logs")))
    log_dir.mkdir(parents=True, exist_ok=True)
    return str(log_dir)


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


class Config:
    """Application configuration"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./foodledger.db")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE_NAME: str = os.getenv("LOG_FILE_NAME", "reports.log")
    LOG_FILE_MAX_BYTES: int = int(os.getenv("LOG_FILE_MAX_BYTES", str(10 * 1024 * 1024)))
    LOG_FILE_BACKUP_COUNT: int = int(os.getenv("LOG_FILE_BACKUP_COUNT", "5"))

    # Report fetch pool
    # Orders, vehicle rents and referrals are independent reads; they run on
    # this pool and are joined before reconciliation.
    REPORT_FETCH_THREADS: int = int(os.getenv("REPORT_FETCH_THREADS", "4"))
    # Unset means wait indefinitely; timeouts belong to the data store.
    REPORT_FETCH_TIMEOUT: Optional[float] = _optional_float("REPORT_FETCH_TIMEOUT")

    # CSV export (BOM so Excel detects UTF-8)
    EXPORT_CSV_ENCODING: str = os.getenv("EXPORT_CSV_ENCODING", "utf-8-sig")

    # API
    API_TITLE: str = os.getenv("API_TITLE", "FoodLedger Reports")
    API_VERSION: str = os.getenv("API_VERSION", "1.0.0")
    CORS_ALLOW_ORIGINS: List[str] = os.getenv(
        "CORS_ALLOW_ORIGINS", "*"
    ).split(",")
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.getenv("APP_PORT", "8888"))


config = Config()
