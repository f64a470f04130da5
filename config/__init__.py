"""Configuration package for the mock marathon service."""
from .llm_routes import AppConfig, LlmRoute, load_config, resolve_route
from .registry import FEEDBACK_KEY, bind_model, get_model, unbind_model
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "resolve_route",
    "FEEDBACK_KEY",
    "bind_model",
    "get_model",
    "unbind_model",
    "Settings",
    "settings",
]
