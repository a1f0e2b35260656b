"""
Runtime configuration.

Values are read from environment variables, optionally supplied through
a ``.env`` file in the working directory:

* ``ROI_DATABASE_URL`` – SQLAlchemy URL of the scenario database
  (default ``sqlite:///scenarios.db``).
* ``ROI_PUBLIC_DIR`` – directory served as static files; reports are
  written to its ``reports`` subdirectory (default ``public``).
* ``ROI_HOST`` / ``ROI_PORT`` – address of the development server
  (default ``127.0.0.1:3000``).
* ``ROI_LOG_LEVEL`` – logging level name (default ``INFO``).
* ``ROI_CORS_ORIGIN`` – value of ``Access-Control-Allow-Origin``
  (default ``*``).
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class Settings:
    database_url: str = "sqlite:///scenarios.db"
    public_dir: str = "public"
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"
    cors_origin: str = "*"

    @property
    def reports_dir(self) -> str:
        return os.path.join(self.public_dir, "reports")


def load_settings() -> Settings:
    """Build ``Settings`` from the environment after loading ``.env``."""
    load_dotenv()
    defaults = Settings()
    return Settings(
        database_url=os.getenv("ROI_DATABASE_URL", defaults.database_url),
        public_dir=os.getenv("ROI_PUBLIC_DIR", defaults.public_dir),
        host=os.getenv("ROI_HOST", defaults.host),
        port=int(os.getenv("ROI_PORT", str(defaults.port))),
        log_level=os.getenv("ROI_LOG_LEVEL", defaults.log_level).upper(),
        cors_origin=os.getenv("ROI_CORS_ORIGIN", defaults.cors_origin),
    )
