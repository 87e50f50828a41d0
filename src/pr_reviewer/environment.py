"""
GitHub Actions environment emulation.

The review flow was written for a workflow run, where GitHub supplies the
repository, event and pull request through environment variables. For local
runs the dispatcher builds a ReviewEnvironment instead and hands it to the
review flow; `apply` mirrors it into the process environment for
collaborators that still read variables directly.
"""

import os
from dataclasses import dataclass
from typing import MutableMapping, Optional, Mapping

LOCAL_ACTION = "local"
PULL_REQUEST_EVENT = "pull_request"
SYNCHRONIZE_ACTION = "synchronize"

_TRUTHY = ("1", "true", "yes", "on")


def env_flag(environ: Mapping[str, str], name: str) -> bool:
    """Interpret an environment variable as a boolean flag."""
    return environ.get(name, "").strip().lower() in _TRUTHY


def mark_local_run(environ: Optional[MutableMapping[str, str]] = None) -> None:
    """Flag the process as running outside GitHub Actions.

    Action-style authorization checks look for GITHUB_ACTION and would
    otherwise treat a local run as misconfigured.
    """
    environ = os.environ if environ is None else environ
    if not environ.get("GITHUB_ACTION"):
        environ["GITHUB_ACTION"] = LOCAL_ACTION


@dataclass(frozen=True)
class ReviewEnvironment:
    """Everything the review flow needs to know about the triggering event."""

    repository: str
    pr_number: int
    event_name: str = PULL_REQUEST_EVENT
    event_action: str = SYNCHRONIZE_ACTION
    dry_run: bool = False
    debug: bool = False

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1]

    @classmethod
    def for_pull_request(
        cls,
        owner: str,
        repo: str,
        pr_number: int,
        dry_run: bool = False,
        debug: bool = True,
    ) -> "ReviewEnvironment":
        """Simulate a `pull_request.synchronize` event for a single PR."""
        return cls(
            repository=f"{owner}/{repo}",
            pr_number=pr_number,
            event_name=PULL_REQUEST_EVENT,
            event_action=SYNCHRONIZE_ACTION,
            dry_run=dry_run,
            debug=debug,
        )

    def to_env(self) -> dict:
        env = {
            "GITHUB_REPOSITORY": self.repository,
            "GITHUB_PULL_REQUEST": str(self.pr_number),
            "GITHUB_EVENT_NAME": self.event_name,
            "GITHUB_EVENT_ACTION": self.event_action,
        }
        if self.debug:
            env["DEBUG"] = "1"
        if self.dry_run:
            env["DRY_RUN"] = "1"
        return env

    def apply(self, environ: Optional[MutableMapping[str, str]] = None) -> None:
        """Write the simulated event into the process environment."""
        environ = os.environ if environ is None else environ
        mark_local_run(environ)
        environ.update(self.to_env())
