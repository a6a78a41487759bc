import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./quizhub.db"
    log_level: str = "INFO"
    echo_sql: bool = False
    firebase_project_id: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            log_level=os.getenv("QUIZHUB_LOG_LEVEL", cls.log_level).upper(),
            echo_sql=os.getenv("QUIZHUB_ECHO_SQL", "").lower() in ("1", "true", "yes"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID", ""),
        )
