from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Database
    database_url: str = "sqlite+aiosqlite:///./formwizard.db"
    database_url_sync: str = "sqlite:///./formwizard.db"

    # Submissions
    password_mask: str = "*** MASKED ***"

    # Client
    api_base_url: str = "http://localhost:8000"
    request_timeout_seconds: float = 10.0
    draft_path: str = "~/.formwizard/draft.json"
    draft_ttl_days: int = 30  # remembered submissions older than this are not resumed

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "FORMWIZARD_"}


settings = Settings()
