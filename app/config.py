from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    supabase_url: str
    supabase_service_key: str
    log_level: str = "INFO"
    http_timeout: float = 30.0
    relay_url: str = ""
    fetch_max_attempts: int = 3
    fetch_retry_delay: float = 2.0
    courtesy_delay: float = 30.0
