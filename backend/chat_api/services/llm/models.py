"""Static table of the models callers may request."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelSpec:
    provider: str  # "xai" | "gemini"
    upstream_id: str


LANGUAGE_MODELS: dict[str, ModelSpec] = {
    "grok-4": ModelSpec("xai", "grok-4-latest"),
    "grok-3": ModelSpec("xai", "grok-3-latest"),
    "grok-3-fast": ModelSpec("xai", "grok-3-fast-latest"),
    "grok-3-mini": ModelSpec("xai", "grok-3-mini-latest"),
    "grok-3-mini-fast": ModelSpec("xai", "grok-3-mini-fast-latest"),
    "gemini-2.0-flash": ModelSpec("gemini", "gemini-2.0-flash"),
}

DEFAULT_MODEL = "grok-4"


def resolve_model(name: str) -> ModelSpec | None:
    return LANGUAGE_MODELS.get(name)
