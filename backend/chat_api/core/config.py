from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Chat API"
    debug: bool = False

    # Persistence
    persistence_backend: str = "sql"  # sql | supabase
    database_url: str = f"sqlite:///{Path(__file__).resolve().parent.parent.parent / 'chat.db'}"
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Identity
    identity_provider: str = "firebase"  # firebase | supabase
    firebase_project_id: str = ""

    # LLM
    xai_api_key: str = ""
    xai_base_url: str = "https://api.x.ai/v1"
    gemini_api_key: str = ""
    temperature: float = 0.7
    max_tokens: int = 2048

    # Server
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "extra": "ignore",
    }


settings = Settings()
