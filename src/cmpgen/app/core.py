import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from cmpgen.analysis import ArgumentValidator, CallSiteAnalyzer, SourceFile, load_unit
from cmpgen.codegen import GENERATED_MARKER, CodeSynthesizer
from cmpgen.common import L, bus
from cmpgen.common.transaction import FileSystemAdapter, TransactionManager
from cmpgen.config import CmpgenConfig, load_config_from_path
from cmpgen.spec import CallInfo, CallSiteError, LoadError, RenderError

log = logging.getLogger(__name__)


@dataclass
class FileReport:
    source: SourceFile
    calls: List[CallInfo] = field(default_factory=list)
    errors: List[CallSiteError] = field(default_factory=list)

    @property
    def path(self) -> Path:
        return self.source.path

    @property
    def call_count(self) -> int:
        return sum(1 for call in self.calls if not call.chained)

    @property
    def is_clean(self) -> bool:
        return not self.errors


class CmpgenApp:
    def __init__(
        self,
        root_path: Path,
        config: Optional[CmpgenConfig] = None,
        fs: Optional[FileSystemAdapter] = None,
    ):
        self.root_path = root_path.resolve()
        self.config = config or load_config_from_path(self.root_path)
        self.fs = fs
        self.analyzer = CallSiteAnalyzer(self.config.call_target)
        self.validator = ArgumentValidator()
        self.synthesizer = CodeSynthesizer(
            self.config.call_target,
            register_name=self.config.register_function,
            suffix=self.config.suffix,
            prune_imports=self.config.prune_imports,
        )

    def _display(self, path: Path) -> Path:
        try:
            return path.relative_to(self.root_path)
        except ValueError:
            return path

    def _resolve_directory(self, directory: Path) -> Path:
        if not directory.is_absolute():
            directory = self.root_path / directory
        return directory.resolve()

    def _display_span(self, error: CallSiteError) -> str:
        span = error.span
        return f"{self._display(span.path)}:{span.start_line}:{span.start_column}"

    def _report_errors(self, report: FileReport) -> None:
        for error in report.errors:
            bus.error(
                L.error.callsite,
                span=self._display_span(error),
                category=error.category,
                message=error.message,
            )

    def analyze(self, directory: Path) -> Optional[List[FileReport]]:
        """
        Loads ``directory`` and validates every call site in it.

        Returns None when the directory cannot be loaded.
        """
        try:
            unit = load_unit(self._resolve_directory(directory), self.config.suffix)
        except LoadError as e:
            bus.error(L.error.load, error=e)
            return None

        reports: List[FileReport] = []
        for source in unit.files:
            calls = self.analyzer.collect(source)
            errors = self.validator.validate_all(calls)
            if not errors and calls:
                errors = self.synthesizer.check(source, calls)
            reports.append(FileReport(source=source, calls=calls, errors=errors))
            log.debug("%s: %d call sites, %d errors", source.path, len(calls), len(errors))
        return reports

    def run_check(self, directory: Path) -> bool:
        reports = self.analyze(directory)
        if reports is None:
            return False

        failed = [r for r in reports if not r.is_clean]
        for report in reports:
            if report.errors:
                self._report_errors(report)
                bus.error(
                    L.check.file.fail, path=self._display(report.path), count=len(report.errors)
                )
            elif report.call_count:
                bus.info(
                    L.check.file.ok, path=self._display(report.path), count=report.call_count
                )

        if failed:
            bus.error(
                L.check.run.fail,
                count=sum(len(r.errors) for r in failed),
                files=len(failed),
            )
            return False

        bus.success(L.check.run.success, count=sum(r.call_count for r in reports))
        return True

    def _is_stale_companion(self, path: Path, tm: TransactionManager) -> bool:
        if not tm.fs.exists(path):
            return False
        return tm.fs.read_text(path).startswith(GENERATED_MARKER)

    def run_generate(self, directory: Path, dry_run: bool = False) -> bool:
        reports = self.analyze(directory)
        if reports is None:
            return False

        bus.debug(
            L.generate.run.start,
            path=self._display(self._resolve_directory(directory)),
            target=", ".join(self.config.call_target.qualified_names),
        )

        tm = TransactionManager(self.root_path, self.fs)
        written: List[Tuple[Path, int]] = []
        removed: List[Path] = []
        success = True

        for report in reports:
            output_path = self.synthesizer.output_path_for(report.path)
            if report.errors:
                success = False
                self._report_errors(report)
                bus.warning(
                    L.generate.file.skipped,
                    path=self._display(report.path),
                    count=len(report.errors),
                )
                continue

            try:
                generated = self.synthesizer.synthesize(report.source, report.calls)
            except CallSiteError as e:
                success = False
                report.errors.append(e)
                self._report_errors(report)
                continue
            except RenderError as e:
                success = False
                # Nothing is written when rendering itself is broken.
                bus.error(L.error.render, error=e)
                return False

            if generated is None:
                if self._is_stale_companion(output_path, tm):
                    tm.add_delete_file(output_path)
                    removed.append(output_path)
                continue

            if tm.fs.exists(output_path) and tm.fs.read_text(output_path) == generated.content:
                bus.info(L.generate.file.unchanged, path=self._display(output_path))
                continue

            tm.add_write(output_path, generated.content)
            written.append((output_path, generated.call_count))

        if dry_run:
            for operation in tm.preview():
                bus.info(L.generate.dry_run.operation, operation=operation)
            bus.info(L.generate.dry_run.summary, count=tm.pending_count)
            return success

        tm.commit()
        for path in removed:
            bus.info(L.generate.file.removed, path=self._display(path))
        for path, count in written:
            bus.success(L.generate.file.success, path=self._display(path), count=count)

        if written:
            bus.success(L.generate.run.complete, count=len(written))
        elif not any(r.call_count for r in reports):
            bus.info(
                L.generate.run.nothing,
                target=", ".join(self.config.call_target.qualified_names),
            )
        return success
