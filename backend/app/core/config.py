import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    EMPLOYEE_TABLE: str = "Employee"
    STORE_TIMEOUT_SECONDS: float = 30.0

    LISTING_PAGE_SIZE: int = 10
    REDIRECT_DELAY_SECONDS: float = 2.0
    SESSION_TTL_SECONDS: float = 30 * 60

    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
