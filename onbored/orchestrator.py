"""Pipeline orchestration for a single analysis run."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .analyzers import AnalysisContext, Analyzer, discover_analyzers
from .analyzers.structure import build_architecture_layers
from .config import ConfigError, LLMConfig, OnboredConfig, load_config
from .git.history import GitRepository, GitRunner
from .llm.enrichment import enrich
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import Report
from .repo_scanner import RepoScanner
from .search import TextSearch
from .summary import build_summary

OUTPUT_DIRNAME = ".onbored"
REPORT_FILENAME = "data.json"

LLMRunnerFactory = Callable[[str, Optional[LLMConfig]], LLMRunner]


def _default_llm_runner(provider: str, config: Optional[LLMConfig]) -> LLMRunner:
    if config is None:
        return LLMRunner(provider)
    return LLMRunner(
        provider,
        model=config.model,
        base_url=config.base_url,
        api_key=config.api_key,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        request_timeout=config.request_timeout,
    )


def _local_now() -> datetime:
    return datetime.now().astimezone()


class Orchestrator:
    """Runs every analyzer over one repository and writes ``data.json``."""

    def __init__(
        self,
        scanner: RepoScanner | None = None,
        analyzers: Optional[Iterable[Analyzer]] = None,
        *,
        git_runner: GitRunner | None = None,
        llm_runner_factory: LLMRunnerFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.scanner = scanner
        self._analyzer_overrides = list(analyzers) if analyzers is not None else None
        self._git_runner = git_runner
        self._llm_runner_factory = llm_runner_factory or _default_llm_runner
        self._clock = clock or _local_now
        self.logger = get_logger("orchestrator")
        self.last_output: Path | None = None

    def run(
        self,
        path: str | Path,
        *,
        output_dir: str | Path | None = None,
        ai_provider: str | None = None,
    ) -> Report:
        """Analyze ``path`` and return the report, also written to disk.

        Raises ``FileNotFoundError`` for a missing path and
        ``NotARepositoryError`` when the path is not a git work tree.
        """
        repo_path = Path(path).expanduser().resolve()
        if not repo_path.exists():
            raise FileNotFoundError(f"Repository path not found: {path}")
        git = GitRepository(repo_path, runner=self._git_runner)
        git.ensure_repository()
        self.logger.info("Analyzing %s", repo_path)

        config = self._load_config(repo_path)
        scanner = self.scanner or RepoScanner(config.exclude_paths)
        manifest = scanner.scan(str(repo_path))
        self.logger.debug("Scanner discovered %d files", len(manifest.files))

        now = self._clock()
        context = AnalysisContext(
            root=repo_path,
            manifest=manifest,
            git=git,
            search=TextSearch(manifest),
            config=config,
            now=now,
        )

        report = Report(repo_name=repo_path.name)
        for analyzer in self._select_analyzers(config):
            self._merge(report, analyzer.name, self._execute_analyzer(analyzer, context))

        if not report.project_title:
            report.project_title = report.repo_name
        report.architecture = build_architecture_layers(
            pages=report.pages,
            components=report.components,
            endpoints=report.api_endpoints,
            functions=report.functions,
            tech_stack=report.tech_stack,
        )
        report.generated_summary = self._summarize(report)

        provider = ai_provider or (config.llm.provider if config.llm else None)
        if provider:
            report.ai = self._enrich(report, repo_path, provider, config.llm)

        report.generated_at = now.isoformat()
        destination = self._resolve_output_dir(repo_path, config, output_dir)
        self.last_output = write_report(report, destination)
        self.logger.info("Report written to %s", self.last_output)
        return report

    @staticmethod
    def _load_config(repo_path: Path) -> OnboredConfig:
        try:
            return load_config(repo_path)
        except ConfigError as exc:
            get_logger("orchestrator").warning("Ignoring invalid configuration: %s", exc)
            return OnboredConfig(root=repo_path)

    def _select_analyzers(self, config: OnboredConfig) -> List[Analyzer]:
        if self._analyzer_overrides is not None:
            return list(self._analyzer_overrides)
        enabled = config.analyzers.enabled or None
        try:
            return discover_analyzers(enabled)
        except ValueError as exc:
            self.logger.warning("%s; running all analyzers", exc)
            return discover_analyzers()

    def _execute_analyzer(self, analyzer: Analyzer, context: AnalysisContext) -> Dict[str, object]:
        if not analyzer.supports(context):
            return analyzer.defaults()
        self.logger.debug("Running analyzer %s", analyzer.__class__.__name__)
        try:
            return analyzer.analyze(context)
        except Exception as exc:  # pragma: no cover - defensive guard
            self._log_exception(f"Analyzer '{analyzer.name}' failed", exc)
            return analyzer.defaults()

    def _merge(self, report: Report, source: str, fields: Dict[str, object]) -> None:
        for key, value in fields.items():
            if not hasattr(report, key):
                self.logger.warning("Analyzer '%s' produced unknown field '%s'", source, key)
                continue
            setattr(report, key, value)

    def _summarize(self, report: Report) -> str:
        try:
            return build_summary(report)
        except Exception as exc:  # pragma: no cover - defensive guard
            self._log_exception("Summary generation failed", exc)
            return report.project_description or "No description available."

    def _enrich(
        self,
        report: Report,
        repo_path: Path,
        provider: str,
        llm_config: Optional[LLMConfig],
    ):
        try:
            runner = self._llm_runner_factory(provider, llm_config)
        except ValueError as exc:
            self.logger.warning("%s", exc)
            return None
        try:
            return enrich(report, repo_path, runner)
        except Exception as exc:
            self._log_exception("AI enrichment failed", exc)
            return None

    @staticmethod
    def _resolve_output_dir(
        repo_path: Path, config: OnboredConfig, output_dir: str | Path | None
    ) -> Path:
        if output_dir is not None:
            return Path(output_dir).expanduser().resolve()
        if config.output_dir is not None:
            return config.output_dir
        return repo_path / OUTPUT_DIRNAME

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


def write_report(report: Report, output_dir: Path) -> Path:
    """Write ``data.json``, replacing any previous run's output."""
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / REPORT_FILENAME
    target.write_text(json.dumps(report.to_dict(), indent=2) + "\n", encoding="utf-8")
    return target


__all__ = ["OUTPUT_DIRNAME", "Orchestrator", "REPORT_FILENAME", "write_report"]
