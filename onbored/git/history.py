"""Git queries used as the repository data source."""

from __future__ import annotations

import json
import re
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Sequence, Tuple

from ..logging import get_logger
from ..models import CommitRecord, OpenIssue

GitRunner = Callable[..., str]

_SHORTLOG_LINE = re.compile(r"^\s*(\d+)\s+(.+)$")
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(("%H", "%cI", "%an", "%s", "%b")) + _RECORD_SEP


class NotARepositoryError(RuntimeError):
    """Raised when the analysis target is not a git work tree."""


class GitRepository:
    """Read-only access to the history of one repository.

    Every query returns empty output when git is missing or the command fails,
    so a broken query only empties its own report section.
    """

    def __init__(self, root: Path | str, runner: GitRunner | None = None) -> None:
        self.root = Path(root)
        self._runner = runner or self._default_runner
        self.logger = get_logger("git")

    # ------------------------------------------------------------------
    # Preconditions

    def ensure_repository(self) -> None:
        """Raise ``NotARepositoryError`` unless ``root`` is inside a git work tree."""
        if not self.root.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {self.root}")
        try:
            self._runner(["git", "rev-parse", "--git-dir"], cwd=self.root)
        except (subprocess.CalledProcessError, OSError) as exc:
            raise NotARepositoryError(f"{self.root} is not a git repository") from exc

    # ------------------------------------------------------------------
    # Identity

    def remote_url(self) -> str:
        return self._run(["git", "remote", "get-url", "origin"]).strip() or "No remote"

    def current_branch(self) -> str:
        return self._run(["git", "branch", "--show-current"]).strip() or "unknown"

    def first_commit_date(self) -> str:
        lines = _non_blank(self._run(["git", "log", "--reverse", "--format=%ci"]))
        return lines[0] if lines else ""

    def latest_commit_date(self) -> str:
        return self._run(["git", "log", "-1", "--format=%ci"]).strip()

    # ------------------------------------------------------------------
    # History

    def commit_log(self) -> List[CommitRecord]:
        """Return every commit on the current branch with its full message, newest first."""
        output = self._run(["git", "log", f"--format={_LOG_FORMAT}"])
        records: List[CommitRecord] = []
        for chunk in output.split(_RECORD_SEP):
            record = _parse_commit(chunk)
            if record is not None:
                records.append(record)
        return records

    def shortlog(self) -> List[Tuple[str, int]]:
        """Return ``(author, commits)`` pairs ordered by commit count."""
        output = self._run(["git", "shortlog", "-sn", "--all"])
        authors: List[Tuple[str, int]] = []
        for line in output.splitlines():
            match = _SHORTLOG_LINE.match(line)
            if match:
                authors.append((match.group(2).strip(), int(match.group(1))))
        return authors

    def author_history(self, author: str, *, depth: int) -> List[str]:
        """Return up to ``depth`` non-blank lines of the author's oneline log with file names."""
        output = self._run(
            [
                "git",
                "log",
                f"--author={author}",
                "--fixed-strings",
                "--oneline",
                "--name-only",
            ]
        )
        return _non_blank(output)[:depth]

    def modified_files(self) -> List[str]:
        """Return one path per modification entry across the whole history."""
        output = self._run(["git", "log", "--name-only", "--pretty=format:", "--diff-filter=M"])
        return _non_blank(output)

    def is_ignored(self, rel_path: str) -> bool:
        return bool(self._run(["git", "check-ignore", rel_path]).strip())

    # ------------------------------------------------------------------
    # Hosting

    def open_issues(self, *, limit: int = 10) -> List[OpenIssue]:
        """Return open issues via the GitHub CLI; empty when ``gh`` is missing or fails."""
        output = self._run(["gh", "issue", "list", "--limit", str(limit), "--json", "number,title"])
        if not output.strip():
            return []
        try:
            payload = json.loads(output)
        except json.JSONDecodeError:
            self.logger.debug("gh issue list returned invalid JSON")
            return []
        if not isinstance(payload, list):
            return []
        issues: List[OpenIssue] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            number, title = item.get("number"), item.get("title")
            if isinstance(number, int) and isinstance(title, str):
                issues.append(OpenIssue(number=number, title=title))
        return issues

    # ------------------------------------------------------------------
    # Clone

    @classmethod
    def clone(
        cls,
        url: str,
        destination: Path,
        *,
        depth: int = 100,
        runner: GitRunner | None = None,
    ) -> "GitRepository":
        """Shallow-clone ``url`` into ``destination``; errors propagate to the caller."""
        run = runner or cls._default_runner
        destination.parent.mkdir(parents=True, exist_ok=True)
        run(["git", "clone", f"--depth={depth}", url, str(destination)], cwd=destination.parent)
        return cls(destination, runner=runner)

    # ------------------------------------------------------------------
    # Internals

    def _run(self, args: Sequence[str]) -> str:
        try:
            return self._runner(list(args), cwd=self.root)
        except (subprocess.CalledProcessError, OSError) as exc:
            self.logger.debug("command failed (%s): %s", " ".join(args[:3]), exc)
            return ""

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
            stdin=subprocess.DEVNULL,
        )
        return completed.stdout


def _parse_commit(chunk: str) -> CommitRecord | None:
    # the header is the first line carrying every field; stray lines before it are skipped
    lines = chunk.split("\n")
    for index, line in enumerate(lines):
        parts = line.split(_FIELD_SEP, 4)
        if len(parts) != 5 or not parts[0]:
            continue
        sha, date, author, subject, body_head = parts
        body = "\n".join([body_head, *lines[index + 1 :]]).strip()
        return CommitRecord(sha=sha, date=date, author=author, subject=subject, body=body)
    return None


def _non_blank(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def repo_name_from_url(url: str) -> str:
    """Return the repository name of a clone URL (``git@host:org/app.git`` -> ``app``)."""
    tail = url.rstrip("/").replace(":", "/").split("/")[-1]
    return tail[:-4] if tail.endswith(".git") else tail or "repo"


__all__ = ["GitRepository", "GitRunner", "NotARepositoryError", "repo_name_from_url"]
