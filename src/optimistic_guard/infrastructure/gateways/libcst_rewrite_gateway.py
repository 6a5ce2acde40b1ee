"""LibCST based rewrite gateway."""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Optional

import libcst as cst
from libcst.metadata import MetadataWrapper, ScopeProvider

from optimistic_guard.domain.config import GuardConfig, split_qualified_name
from optimistic_guard.domain.entities import RewriteResult
from optimistic_guard.domain.protocols import RewriteGatewayProtocol
from optimistic_guard.infrastructure.diagnostics import DiagnosticCollector
from optimistic_guard.infrastructure.gateways.transformers import (
    AddImportTransformer,
    GuardTransformer,
    OptimisticLockingTransform,
    conflicting_bindings,
)

logger = logging.getLogger(__name__)


class LibCSTRewriteGateway(RewriteGatewayProtocol):
    """Gateway applying the @optimistic_locking rewrite to Python source using LibCST."""

    def __init__(self, config: Optional[GuardConfig] = None) -> None:
        self.config = config or GuardConfig()
        self.transform = OptimisticLockingTransform(self.config)

    def _imports_by_module(self) -> dict[str, list[str]]:
        """Names the recovery body uses, grouped by the module they are imported from."""
        by_module: dict[str, list[str]] = defaultdict(list)
        for qualified_name in (self.config.failure_type, self.config.filter_function):
            module, name = split_qualified_name(qualified_name)
            if name not in by_module[module]:
                by_module[module].append(name)
        return dict(by_module)

    def rewrite_source(self, code: str, path: Optional[str] = None) -> RewriteResult:
        """
        Rewrite every guarded function in a module.

        Args:
            code: Module source text
            path: Path used in diagnostics

        Returns:
            RewriteResult; on a syntax error, or when an added import would rebind
            a name the module already defines, the code is returned unchanged with
            an error diagnostic
        """
        collector = DiagnosticCollector(path)
        try:
            module = cst.parse_module(code)
        except cst.ParserSyntaxError as exc:
            collector.add_error_and_continue(f"Cannot parse module: {exc.message}", exc.raw_line, exc.raw_column + 1)
            return RewriteResult(path=path, original_code=code, new_code=code, diagnostics=collector.diagnostics)

        wrapper = MetadataWrapper(module)
        guard = GuardTransformer(self.transform, collector)
        module = wrapper.visit(guard)

        if guard.rewritten and self.config.add_imports:
            imports = self._imports_by_module()
            global_scope = wrapper.resolve(ScopeProvider)[wrapper.module]
            conflicts = [
                (source, name)
                for source, names in imports.items()
                for name in conflicting_bindings(global_scope, source, names)
            ]
            if conflicts:
                for source, name in conflicts:
                    collector.add_error_and_continue(
                        f"Cannot import '{name}' from {source}: the name is already bound in this module"
                    )
                return RewriteResult(path=path, original_code=code, new_code=code, diagnostics=collector.diagnostics)
            for source, names in imports.items():
                module = module.visit(AddImportTransformer({"module": source, "imports": names}))

        for name in guard.rewritten:
            logger.debug("%s: rewrote %s", path or "<source>", name)
        return RewriteResult(
            path=path,
            original_code=code,
            new_code=module.code,
            diagnostics=collector.diagnostics,
            rewritten_functions=list(guard.rewritten),
        )

    def rewrite_file(self, path: Path, write: bool = True) -> RewriteResult:
        """Rewrite one file; write it back only when asked and when the code changed."""
        code = path.read_text(encoding="utf-8")
        result = self.rewrite_source(code, str(path))
        if write and result.changed:
            path.write_text(result.new_code, encoding="utf-8")
        return result
