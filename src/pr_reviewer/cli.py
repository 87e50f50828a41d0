"""
Command-line interface for the PR Reviewer.

This module provides the `review` entry point: list pull requests for a
repository, or run a review of one pull request locally, simulating the
GitHub Actions event the review flow expects.
"""

import argparse
import asyncio
import logging
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, MutableMapping, Optional, Sequence, Tuple, Union

from .adapters.github_adapter import GitHubAdapter
from .analyzers.ai_analyzer import AIAnalyzer
from .config import ConfigManager
from .credentials import CredentialResolver
from .environment import ReviewEnvironment, env_flag
from .exceptions import TranscriptWriteError
from .providers import create_provider
from .reporter import Reporter
from .review import handle_pull_request
from .transcript import Console, begin_capture

logger = logging.getLogger(__name__)

LIST_PRS = "list-prs"
REVIEW = "review"

STATES = ("open", "closed", "all")
DEFAULT_LIMIT = 10

USAGE = """Usage:
  review --list-prs [--owner <owner>] [--repo <repo>] [--state open|closed|all] [--limit N]
  review --pr <number> [--owner <owner>] [--repo <repo>] [--dry-run] [--out [path] | -out [path]]

Examples:
  review --list-prs --owner shawnd --repo pr-reviewer
  review --pr 123 --dry-run
  review --pr 123 --dry-run --out review-output.txt
  review --pr 123 --owner myorg --repo myrepo

Environment:
  Set GITHUB_REPOSITORY=owner/repo to avoid specifying --owner and --repo each time
  Set GITHUB_TOKEN or authenticate with 'gh auth login'
  Set LLM_PROVIDER (gemini|openai), LLM_MODEL and LLM_API_KEY for reviews
"""


@dataclass(frozen=True)
class ExecutionArgs:
    """Parsed command intent for one invocation."""

    action: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    state: str = "open"
    limit: int = DEFAULT_LIMIT
    pr: Optional[int] = None
    dry_run: bool = False
    out: Union[str, bool, None] = None
    config_file: Optional[str] = None
    extra: Tuple[str, ...] = ()


class ArgumentParsingError(Exception):
    """Raised instead of exiting when the argument parser rejects input."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ArgumentParsingError(message)


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = _ArgumentParser(prog="review", add_help=False, allow_abbrev=False)

    parser.add_argument("--help", "-h", action="store_true")
    parser.add_argument("--list-prs", action="store_true", dest="list_prs")
    # Values are optional and checked in parse_args, so one bad or missing
    # value never discards the rest of the command line
    parser.add_argument("--state", nargs="?")
    parser.add_argument("--limit", nargs="?")
    parser.add_argument("--pr", nargs="?")
    parser.add_argument("--owner", nargs="?")
    parser.add_argument("--repo", nargs="?")
    parser.add_argument("--dry-run", action="store_true", dest="dry_run")
    parser.add_argument("--out", "-out", nargs="?", const=True, default=None)
    parser.add_argument("--config", nargs="?", dest="config_file")

    return parser


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_args(tokens: Sequence[str]) -> ExecutionArgs:
    """
    Parse raw argument tokens.

    Never raises: unknown tokens are collected in `extra`, and a missing or
    malformed value falls back to its default without losing the action.
    """
    try:
        parsed, unknown = create_parser().parse_known_args(list(tokens))
    except ArgumentParsingError:
        return ExecutionArgs(extra=tuple(tokens))

    extra = list(unknown)
    out = parsed.out
    # A flag-like token after --out is never a path
    if isinstance(out, str) and out.startswith("-"):
        extra.append(out)
        out = True

    limit = _to_int(parsed.limit)
    pr = _to_int(parsed.pr)
    if pr is not None and pr <= 0:
        pr = None

    if parsed.help:
        action = None
    elif parsed.list_prs:
        action = LIST_PRS
    elif pr:
        action = REVIEW
    else:
        action = None

    return ExecutionArgs(
        action=action,
        owner=parsed.owner,
        repo=parsed.repo,
        state=parsed.state if parsed.state in STATES else "open",
        limit=limit if limit and limit > 0 else DEFAULT_LIMIT,
        pr=pr,
        dry_run=parsed.dry_run,
        out=out,
        config_file=parsed.config_file,
        extra=tuple(extra),
    )


def configure_logging(console: Console, level: int = logging.WARNING) -> None:
    """Route package log records through the console's error stream."""
    logger = logging.getLogger("pr_reviewer")
    for handler in list(logger.handlers):
        if getattr(handler, "pr_reviewer_console", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(console.stderr)
    handler.pr_reviewer_console = True
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)


class ReviewCLI:
    """Command-line interface for the PR Reviewer."""

    def __init__(
        self,
        console: Optional[Console] = None,
        resolver: Optional[CredentialResolver] = None,
        environ: Optional[MutableMapping[str, str]] = None,
        adapter_factory: Callable[..., GitHubAdapter] = GitHubAdapter,
        provider_factory: Callable = create_provider,
        review_flow: Callable = handle_pull_request,
        cwd: Optional[Path] = None,
    ):
        self.console = console or Console()
        self.environ = os.environ if environ is None else environ
        self.resolver = resolver or CredentialResolver(
            environ=self.environ, env_file=str(cwd / ".env") if cwd else None
        )
        self.adapter_factory = adapter_factory
        self.provider_factory = provider_factory
        self.review_flow = review_flow
        self.cwd = cwd
        self.debug = False

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """
        Run the PR reviewer.

        Args:
            argv: Command-line arguments (defaults to sys.argv[1:])

        Returns:
            Exit code (0 for success, 1 for error)
        """
        args = parse_args(sys.argv[1:] if argv is None else argv)
        self.debug = env_flag(self.environ, "DEBUG")
        configure_logging(self.console, logging.DEBUG if self.debug else logging.WARNING)

        try:
            return asyncio.run(self.dispatch(args))
        except KeyboardInterrupt:
            self.console.print("\nReview cancelled by user", err=True)
            return 1
        except Exception as e:
            if self.debug:
                traceback.print_exc(file=self.console.stderr)
            self.console.print(f"Error: {e}", err=True)
            return 1

    async def dispatch(self, args: ExecutionArgs) -> int:
        """Route parsed arguments to the listing or review flow."""
        if args.action == LIST_PRS:
            return self._list_prs(args)
        if args.action == REVIEW:
            return await self._review_pr(args)

        self.console.print(USAGE)
        return 0

    def _config_manager(self, args: ExecutionArgs) -> ConfigManager:
        self.resolver.load_dotenv()
        config_manager = ConfigManager(
            config_file=args.config_file, load_env=False, environ=self.environ
        )
        # .env or the config file may turn debug on after startup
        if config_manager.get_config().debug:
            self._enable_debug()
        return config_manager

    def _enable_debug(self) -> None:
        self.debug = True
        configure_logging(self.console, logging.DEBUG)

    def _target(self, args: ExecutionArgs, config) -> Tuple[str, str]:
        default_owner, default_repo = config.default_owner_and_repo
        return args.owner or default_owner, args.repo or default_repo

    def _list_prs(self, args: ExecutionArgs) -> int:
        credential = self.resolver.resolve()
        config = self._config_manager(args).get_config()
        owner, repo = self._target(args, config)

        adapter = self.adapter_factory(token=credential.token, api_url=config.github.api_url)
        for pull in adapter.list_pull_requests(owner, repo, state=args.state, limit=args.limit):
            self.console.print(f"#{pull.number} {pull.title} by @{pull.author}")
        return 0

    async def _review_pr(self, args: ExecutionArgs) -> int:
        credential = self.resolver.resolve()
        config_manager = self._config_manager(args)
        config = config_manager.get_config()

        errors = config_manager.validate_config()
        if errors:
            self.console.print("Configuration errors:", err=True)
            for error in errors:
                self.console.print(f"  - {error}", err=True)
            return 1

        owner, repo = self._target(args, config)
        environment = ReviewEnvironment.for_pull_request(
            owner, repo, args.pr, dry_run=args.dry_run
        )
        environment.apply(self.environ)
        if environment.debug:
            self._enable_debug()

        release = None
        if args.out:
            release = begin_capture(self.console, args.out, args.pr, cwd=self.cwd)

        try:
            adapter = self.adapter_factory(
                token=credential.token, api_url=config.github.api_url
            )
            provider = self.provider_factory(config.llm, debug=environment.debug)
            analyzer = AIAnalyzer(provider, temperature=config.llm.temperature)
            reporter = Reporter(adapter, self.console)

            await self.review_flow(environment, adapter, analyzer, reporter, self.console)
        except BaseException:
            if release:
                # Keep the review failure as the reported error
                try:
                    release()
                except TranscriptWriteError as e:
                    logger.error("Could not save output: %s", e)
            raise

        if release:
            release()

        return 0


def main():
    """Main entry point."""
    cli = ReviewCLI()
    exit_code = cli.run()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
