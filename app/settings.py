import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    admin_password: str = ""
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    recent_limit: int = 50
    currency: str = "EGP"


def get_settings() -> Settings:
    data_dir = Path(os.environ.get("DATA_DIR") or Path.cwd() / ".data")
    db_path = Path(os.environ.get("DB_PATH") or data_dir / "ledger.sqlite")
    return Settings(
        data_dir=data_dir,
        db_path=db_path,
        admin_password=os.environ.get("ADMIN_PASSWORD", ""),
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3000")),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        recent_limit=int(os.environ.get("RECENT_LIMIT", "50")),
        currency=os.environ.get("CURRENCY", "EGP"),
    )
