from sqlmodel import SQLModel, create_engine

from chat_api.core.config import settings

engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)


def init_db() -> None:
    import chat_api.models.chat  # noqa: F401 - ensure models are registered
    SQLModel.metadata.create_all(engine)
