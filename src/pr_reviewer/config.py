"""
Configuration management for the PR Reviewer.

This module handles loading and validating configuration from environment
variables and an optional YAML config file.
"""

import logging
import os
from typing import Dict, Any, Optional, List, Mapping
from dataclasses import dataclass, field
from pathlib import Path
import yaml

from .credentials import load_dotenv_once
from .environment import env_flag

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY = "shawnd/pr-reviewer"

DEFAULT_MODELS = {
    "gemini": "gemini-1.5-flash",
    "openai": "gpt-4o-mini",
}

API_KEY_FALLBACKS = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
}


@dataclass
class GitServerConfig:
    """Configuration for a git server."""

    name: str
    api_url: str


@dataclass
class LLMConfig:
    """Configuration for the model backend."""

    family: str = "gemini"
    model: Optional[str] = None
    api_key: Optional[str] = None
    temperature: float = 0.0

    @property
    def model_name(self) -> str:
        return self.model or DEFAULT_MODELS.get(self.family, "")


@dataclass
class ReviewerConfig:
    """Main configuration for the PR Reviewer."""

    github: GitServerConfig = field(
        default_factory=lambda: GitServerConfig(
            name="github", api_url="https://api.github.com"
        )
    )
    llm: LLMConfig = field(default_factory=LLMConfig)

    # owner/repo used when --owner/--repo are not given
    default_repository: str = DEFAULT_REPOSITORY

    debug: bool = False

    @property
    def default_owner_and_repo(self) -> tuple:
        owner, _, repo = self.default_repository.partition("/")
        return owner, repo


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(
        self,
        config_file: Optional[str] = None,
        load_env: bool = True,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to YAML config file
            load_env: Whether to load .env file
            environ: Environment mapping (defaults to os.environ)
        """
        self.config_file = config_file
        self.environ = os.environ if environ is None else environ

        if load_env:
            load_dotenv_once()

        self.config = self._load_config()

    def get_config(self) -> ReviewerConfig:
        """Get the loaded configuration."""
        return self.config

    def validate_config(self) -> List[str]:
        """
        Validate the configuration and return any errors.

        Returns:
            List of validation error messages
        """
        errors = []

        if self.config.llm.family not in DEFAULT_MODELS:
            errors.append(
                f"Unknown LLM provider '{self.config.llm.family}'. "
                f"Choose one of: {', '.join(sorted(DEFAULT_MODELS))}."
            )

        if not self.config.llm.api_key:
            errors.append(
                "LLM API key is required for reviews. Set LLM_API_KEY environment variable."
            )

        if not 0.0 <= self.config.llm.temperature <= 2.0:
            errors.append("LLM temperature must be between 0.0 and 2.0")

        if "/" not in self.config.default_repository:
            errors.append(
                f"Default repository must be owner/repo, got '{self.config.default_repository}'"
            )

        return errors

    def _load_config(self) -> ReviewerConfig:
        """Load configuration from various sources."""
        config = ReviewerConfig()

        # Load from config file if provided
        if self.config_file and Path(self.config_file).exists():
            config = self._load_from_file(self.config_file)
        elif self.config_file:
            logger.warning("Config file not found: %s", self.config_file)

        # Override with environment variables
        self._load_from_environment(config)

        return config

    def _load_from_file(self, config_file: str) -> ReviewerConfig:
        """Load configuration from YAML file."""
        try:
            with open(config_file, "r") as f:
                data = yaml.safe_load(f) or {}

            return self._dict_to_config(data)

        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load config file %s: %s", config_file, e)
            return ReviewerConfig()

    def _load_from_environment(self, config: ReviewerConfig) -> None:
        """Load configuration from environment variables."""
        env = self.environ

        if env.get("GITHUB_API_URL"):
            config.github.api_url = env["GITHUB_API_URL"]
        if env.get("GITHUB_REPOSITORY"):
            config.default_repository = env["GITHUB_REPOSITORY"]

        # Model backend
        if env.get("LLM_PROVIDER"):
            config.llm.family = env["LLM_PROVIDER"].strip().lower()
        if env.get("LLM_MODEL"):
            config.llm.model = env["LLM_MODEL"]

        fallback = API_KEY_FALLBACKS.get(config.llm.family)
        api_key = env.get("LLM_API_KEY") or (env.get(fallback) if fallback else None)
        if api_key:
            config.llm.api_key = api_key

        if env.get("LLM_TEMPERATURE"):
            try:
                config.llm.temperature = float(env["LLM_TEMPERATURE"])
            except ValueError:
                logger.warning(
                    "Ignoring invalid LLM_TEMPERATURE %r", env["LLM_TEMPERATURE"]
                )

        if env.get("DEBUG"):
            config.debug = env_flag(env, "DEBUG")

    def _dict_to_config(self, data: Dict[str, Any]) -> ReviewerConfig:
        """Convert dictionary to ReviewerConfig dataclass."""
        config = ReviewerConfig()

        if "github" in data:
            github_data = data["github"] or {}
            config.github = GitServerConfig(
                name="github",
                api_url=github_data.get("api_url", config.github.api_url),
            )

        if "llm" in data:
            for key, value in (data["llm"] or {}).items():
                if hasattr(config.llm, key):
                    setattr(config.llm, key, value)

        if data.get("default_repository"):
            config.default_repository = data["default_repository"]

        if "debug" in data:
            config.debug = bool(data["debug"])

        return config
