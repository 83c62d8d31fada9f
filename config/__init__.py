"""Configuration package for the interview service."""
from .routes import OPENAI_COMPATIBLE_PROVIDERS, LlmRoute, route_for_provider
from .settings import Settings, settings

__all__ = [
    "OPENAI_COMPATIBLE_PROVIDERS",
    "LlmRoute",
    "route_for_provider",
    "Settings",
    "settings",
]
