"""
Console output and transcript capture.

Everything the reviewer prints goes through a Console, whose two streams
echo to the real stdout/stderr and, while a capture is active, also append
to an in-memory Transcript. Releasing the capture flushes the transcript to
a file so a dry run leaves a reviewable record behind.
"""

import os
import re
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional, TextIO, Union

from .exceptions import TranscriptWriteError

DEFAULT_OUTPUT_DIR = "dry"


class Transcript:
    """Ordered, append-only record of console output."""

    def __init__(self, path: Path):
        self.path = path
        self.chunks: List[str] = []
        self.dropped = 0
        self.flushed = False

    def append(self, data: Any) -> None:
        self.chunks.append(data if isinstance(data, str) else str(data))

    def text(self) -> str:
        return "".join(self.chunks)

    def flush(self) -> Path:
        """Write the transcript to its path. Only the first call writes."""
        if self.flushed:
            return self.path
        self.flushed = True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(self.text(), encoding="utf-8")
        except OSError as e:
            raise TranscriptWriteError(self.path, str(e)) from e
        return self.path


class TeeStream:
    """File-like writer that echoes to a real stream and feeds a transcript."""

    def __init__(self, target: Optional[TextIO] = None, name: str = "stdout"):
        self._target = target
        self.name = name
        self.transcript: Optional[Transcript] = None

    @property
    def target(self) -> TextIO:
        # Resolved lazily so pytest's capsys/capfd replacements are honoured.
        if self._target is not None:
            return self._target
        return getattr(sys, self.name)

    def write(self, data: Any) -> int:
        text = data if isinstance(data, str) else str(data)
        transcript = self.transcript
        if transcript is not None:
            try:
                transcript.append(text)
            except Exception:
                transcript.dropped += 1
        return self.target.write(text)

    def flush(self) -> None:
        self.target.flush()

    def isatty(self) -> bool:
        return getattr(self.target, "isatty", lambda: False)()


class Console:
    """Writer abstraction injected into the dispatcher and the review flow."""

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self.stdout = TeeStream(stdout, "stdout")
        self.stderr = TeeStream(stderr, "stderr")

    def print(self, *values: Any, sep: str = " ", end: str = "\n", err: bool = False) -> None:
        print(*values, sep=sep, end=end, file=self.stderr if err else self.stdout)

    def attach(self, transcript: Optional[Transcript]) -> None:
        self.stdout.transcript = transcript
        self.stderr.transcript = transcript


def default_transcript_path(pr_number: Any, cwd: Optional[Path] = None) -> Path:
    """Default location for a PR transcript: dry/pr-<digits>.txt."""
    cwd = cwd or Path.cwd()
    digits = re.sub(r"[^0-9]", "", str(pr_number))
    return cwd / DEFAULT_OUTPUT_DIR / f"pr-{digits}.txt"


def resolve_transcript_path(
    target: Union[str, bool, None], pr_number: Any, cwd: Optional[Path] = None
) -> Path:
    cwd = cwd or Path.cwd()
    if isinstance(target, str) and target.strip():
        path = Path(target)
        return path if path.is_absolute() else cwd / path
    return default_transcript_path(pr_number, cwd)


def begin_capture(
    console: Console,
    target: Union[str, bool, None],
    pr_number: Any,
    cwd: Optional[Path] = None,
) -> Callable[[], Path]:
    """
    Start capturing console output.

    Args:
        console: Console whose streams should be recorded
        target: Explicit output path, or True for the default path
        pr_number: Pull request identifier used for the default path
        cwd: Working directory for relative paths (defaults to Path.cwd())

    Returns:
        A release function that detaches the capture, writes the transcript
        and prints where it was saved. Safe to call more than once.
    """
    cwd = cwd or Path.cwd()
    transcript = Transcript(resolve_transcript_path(target, pr_number, cwd))
    console.attach(transcript)

    def release() -> Path:
        if transcript.flushed:
            return transcript.path
        console.attach(None)
        path = transcript.flush()
        shown = os.path.relpath(path, cwd)
        console.print(f"\n[dry-run] Saved output to {shown}")
        return path

    return release
