import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

BASE_DIR = Path(__file__).resolve().parent


def parse_origins(value: str) -> List[str]:
    """Parse CORS origins from a comma separated string"""
    return [origin.strip() for origin in value.split(",") if origin.strip()] or ["*"]


@dataclass
class Settings:
    database_url: str = "mongodb://127.0.0.1:27017"
    database_name: str = "Asseta"
    port: int = 5000
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    static_dir: Path = BASE_DIR / "public"
    activity_actor: str = "System"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_name=os.getenv("DATABASE_NAME", cls.database_name),
            port=int(os.getenv("PORT", cls.port)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            cors_origins=parse_origins(os.getenv("CORS_ORIGINS", "*")),
            static_dir=Path(os.getenv("STATIC_DIR", str(BASE_DIR / "public"))),
            activity_actor=os.getenv("ACTIVITY_ACTOR", cls.activity_actor),
        )
