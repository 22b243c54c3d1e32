"""A canned stand-in for the git command runner."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, Mapping, Sequence, Tuple

FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"


def log_line(sha: str, date: str, author: str, subject: str, body: str = "") -> str:
    """Format one commit the way ``GitRepository.commit_log`` requests it."""
    return FIELD_SEP.join((sha, date, author, subject, body)) + RECORD_SEP


class FakeGitRunner:
    """Answers git commands from canned output keyed by argument prefix.

    The longest matching prefix wins. Commands without a canned answer, and
    commands listed in ``fail``, raise ``CalledProcessError`` like a real
    failing git call.
    """

    def __init__(
        self,
        responses: Mapping[Sequence[str], str] | None = None,
        *,
        fail: Iterable[Sequence[str]] = (),
        repository: bool = True,
    ) -> None:
        self.responses: dict[Tuple[str, ...], str] = {
            tuple(prefix): output for prefix, output in (responses or {}).items()
        }
        if repository:
            self.responses.setdefault(("git", "rev-parse", "--git-dir"), ".git\n")
        self.fail = [tuple(prefix) for prefix in fail]
        self.calls: list[list[str]] = []

    def __call__(self, args: Iterable[str], *, cwd: Path) -> str:
        command = list(args)
        self.calls.append(command)
        for prefix in self.fail:
            if tuple(command[: len(prefix)]) == prefix:
                raise subprocess.CalledProcessError(128, command)
        best: Tuple[str, ...] | None = None
        for prefix in self.responses:
            if tuple(command[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            raise subprocess.CalledProcessError(1, command)
        return self.responses[best]


__all__ = ["FakeGitRunner", "log_line"]
