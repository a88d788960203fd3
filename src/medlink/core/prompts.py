"""
Prompt Manager.

Assistant prompts live in ``config/prompts.yaml`` so wording can change
without a code release. Lookups use dot-notation paths.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .exceptions import InternalServerError

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS_PATH = Path(__file__).resolve().parents[3] / "config" / "prompts.yaml"


class PromptManager:
    """
    Loads prompts from YAML and resolves them by path.

    Usage:
        manager = get_prompt_manager()
        system = manager.get("chatbot.system_prompt")
        user = manager.format("chatbot.user_template", message="I feel dizzy")
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path or DEFAULT_PROMPTS_PATH
        self._prompts: dict[str, Any] = {}
        self._load_prompts()

    def _load_prompts(self) -> None:
        if not self.config_path.exists():
            raise InternalServerError(
                message=f"Prompt configuration file not found: {self.config_path}",
                error_code="CONFIGURATION_ERROR",
            )

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._prompts = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InternalServerError(
                message=f"Invalid YAML in prompts configuration: {e}",
                error_code="CONFIGURATION_ERROR",
            ) from e

        logger.info("Loaded prompts from %s", self.config_path)

    def get(self, path: str, default: str | None = None) -> str:
        """
        Get a prompt by dot-notation path.

        Raises:
            KeyError: If path not found and no default provided
        """
        value: Any = self._prompts
        for key in path.split("."):
            if not isinstance(value, dict) or key not in value:
                if default is not None:
                    return default
                raise KeyError(f"Prompt not found: {path}")
            value = value[key]

        if not isinstance(value, str):
            raise KeyError(f"Path '{path}' does not point to a string")
        return value.strip()

    def format(self, path: str, **kwargs: Any) -> str:
        """Get a prompt template and substitute ``{placeholders}``."""
        return self.get(path).format(**kwargs)


_prompt_manager: PromptManager | None = None


def get_prompt_manager() -> PromptManager:
    global _prompt_manager
    if _prompt_manager is None:
        _prompt_manager = PromptManager()
    return _prompt_manager
