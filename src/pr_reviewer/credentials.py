"""
GitHub token resolution.

The token is looked up, in order, in the process environment, a `.env`
file in the working directory and the GitHub CLI session. The first source
that yields a token wins and the result is cached in the environment so
later collaborators can read GITHUB_TOKEN directly.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, MutableMapping, Optional

from dotenv import dotenv_values

from .environment import mark_local_run
from .exceptions import ExternalProcessError, FileIOError, NoCredentialError

logger = logging.getLogger(__name__)

TOKEN_VARIABLE = "GITHUB_TOKEN"
GH_TOKEN_COMMAND = ["gh", "auth", "token"]


class CredentialSource(str, Enum):
    ENVIRONMENT = "environment"
    DOTENV = "dotenv"
    GH_CLI = "gh-cli"


@dataclass(frozen=True)
class Credential:
    """A resolved GitHub token and where it came from."""

    token: str
    source: CredentialSource


class CredentialResolver:
    """Resolves the GitHub token once per process."""

    def __init__(
        self,
        environ: Optional[MutableMapping[str, str]] = None,
        env_file: Optional[str] = None,
        command: Optional[List[str]] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """
        Initialize the resolver.

        Args:
            environ: Environment mapping to read from and cache into
            env_file: Path to the `.env` file (defaults to ./.env at load time)
            command: Command that prints a token on stdout
            runner: subprocess.run-compatible callable
        """
        self.environ = os.environ if environ is None else environ
        self.env_file = env_file
        self.command = command or list(GH_TOKEN_COMMAND)
        self.runner = runner
        self._credential: Optional[Credential] = None
        self._dotenv_loaded = False

    def resolve(self) -> Credential:
        """
        Resolve the GitHub token.

        Returns:
            The resolved Credential

        Raises:
            NoCredentialError: If no source yields a token
        """
        mark_local_run(self.environ)

        if self._credential is not None:
            return self._credential

        token = self.environ.get(TOKEN_VARIABLE)
        if token:
            return self._remember(token, CredentialSource.ENVIRONMENT)

        self.load_dotenv()
        token = self.environ.get(TOKEN_VARIABLE)
        if token:
            return self._remember(token, CredentialSource.DOTENV)

        try:
            token = self._token_from_cli()
        except ExternalProcessError as e:
            logger.warning("GitHub CLI token unavailable: %s", e)
        else:
            if token:
                return self._remember(token, CredentialSource.GH_CLI)

        raise NoCredentialError()

    def load_dotenv(self) -> bool:
        """
        Load `.env` into the environment once, never overriding set values.

        Returns:
            True if a file was loaded by this call
        """
        if self._dotenv_loaded:
            return False
        self._dotenv_loaded = True

        env_path = Path(self.env_file) if self.env_file else Path.cwd() / ".env"
        if not env_path.exists():
            return False

        try:
            values = self._read_dotenv(env_path)
        except FileIOError as e:
            logger.warning("Failed to load .env file: %s", e)
            return False

        for key, value in values.items():
            if value is not None and key not in self.environ:
                self.environ[key] = value
        logger.debug("Loaded environment from %s", env_path)
        return True

    def _read_dotenv(self, env_path: Path) -> dict:
        try:
            return dotenv_values(env_path)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise FileIOError(env_path, str(e)) from e

    def _token_from_cli(self) -> str:
        command_text = " ".join(self.command)
        try:
            result = self.runner(
                self.command,
                capture_output=True,
                text=True,
                check=True,
                timeout=30,
            )
        except FileNotFoundError as e:
            raise ExternalProcessError(command_text, "command not found") from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise ExternalProcessError(command_text, detail) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalProcessError(command_text, "timed out") from e

        return (result.stdout or "").strip()

    def _remember(self, token: str, source: CredentialSource) -> Credential:
        self.environ[TOKEN_VARIABLE] = token
        self._credential = Credential(token=token, source=source)
        logger.debug("Resolved GitHub token from %s", source.value)
        return self._credential


_default_resolver = CredentialResolver()


def resolve_token() -> str:
    """Resolve the process-wide GitHub token."""
    return _default_resolver.resolve().token


def load_dotenv_once() -> bool:
    """Load ./.env into os.environ if it has not been loaded yet."""
    return _default_resolver.load_dotenv()
