"""Use case: rewrite guarded functions across files and directories."""

import logging
from collections.abc import Sequence
from pathlib import Path

from optimistic_guard.domain.entities import Diagnostic, RewriteReport, RewriteResult, Severity
from optimistic_guard.domain.protocols import FileSystemProtocol, RewriteGatewayProtocol

logger = logging.getLogger(__name__)


class RewriteSourcesUseCase:
    """Run the rewrite over every Python file under the given paths. One bad file never stops the run."""

    def __init__(self, rewrite_gateway: RewriteGatewayProtocol, filesystem: FileSystemProtocol) -> None:
        self.rewrite_gateway = rewrite_gateway
        self.filesystem = filesystem

    def execute(self, paths: Sequence[Path], write: bool = True) -> RewriteReport:
        missing = [p for p in paths if not p.exists()]
        diagnostics = [
            Diagnostic(severity=Severity.ERROR, message="No such file or directory", path=str(p))
            for p in missing
        ]
        results: list[RewriteResult] = []
        for file_path in self.filesystem.iter_python_files(p for p in paths if p.exists()):
            try:
                results.append(self.rewrite_gateway.rewrite_file(file_path, write=write))
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping %s: %s", file_path, exc)
                diagnostics.append(
                    Diagnostic(severity=Severity.ERROR, message=f"Cannot read file: {exc}", path=str(file_path))
                )
        report = RewriteReport(results=results, diagnostics=diagnostics)
        logger.info(
            "Processed %d file(s), %d changed", len(results), len(report.changed_results)
        )
        return report
