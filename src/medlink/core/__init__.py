"""Core package - configuration, exceptions, security and domain rules."""
from .config import Settings, get_settings
from .prompts import PromptManager, get_prompt_manager

__all__ = [
    "Settings",
    "get_settings",
    "PromptManager",
    "get_prompt_manager",
]
