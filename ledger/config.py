from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    telegram_bot_token: str = ""
    llm_api_key: str = ""
    llm_base_url: str | None = None
    llm_model: str = "gpt-4o-mini"
    db_path: str = "expenses.json"

    timezone: str = "America/Sao_Paulo"
    lastlist_ttl_seconds: int = 1800

    # Sender ids are compared digits-only (phone numbers, Telegram user ids)
    my_sender_id: str = ""
    spouse_sender_id: str = ""
    my_payer_name: str = "matheus"
    spouse_payer_name: str = "esposa"

    allow_all_groups: bool = True
    group_ids: list[str] = []

    max_list_rows: int = 200
    reply_chunk_chars: int = 3000

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache
def get_settings() -> Settings:
    return Settings()
