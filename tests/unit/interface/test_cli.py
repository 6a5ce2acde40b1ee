"""Unit tests for the Typer CLI."""

import io
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from optimistic_guard.infrastructure.gateways.libcst_rewrite_gateway import LibCSTRewriteGateway
from optimistic_guard.interface.cli import (
    EXIT_ERROR,
    EXIT_OK,
    EXIT_WOULD_CHANGE,
    CLIDependencies,
    create_app,
)
from optimistic_guard.interface.reporters import TerminalRewriteReporter

GUARDED = "@optimistic_locking\ndef update(self):\n    save()\n"

runner = CliRunner()


class _App:
    def __init__(self, config: GuardConfig) -> None:
        self.output = io.StringIO()
        deps = CLIDependencies(
            config=config,
            rewrite_gateway=LibCSTRewriteGateway(config),
            filesystem=FileSystemGateway(),
            reporter=TerminalRewriteReporter(Console(file=self.output, width=200)),
        )
        self.app = create_app(deps)

    def invoke(self, *args: str):
        return runner.invoke(self.app, list(args))


@pytest.fixture
def cli(config: GuardConfig) -> _App:
    return _App(config)


def test_rewrite_writes_files(cli: _App, tmp_path: Path) -> None:
    target = tmp_path / "books.py"
    target.write_text(GUARDED, encoding="utf-8")

    result = cli.invoke("rewrite", str(target))

    assert result.exit_code == EXIT_OK
    assert "except OptimisticLockingFailure:" in target.read_text(encoding="utf-8")
    assert "1 file(s) rewritten, 0 unchanged." in cli.output.getvalue()


def test_check_exits_one_when_files_would_change(cli: _App, tmp_path: Path) -> None:
    target = tmp_path / "books.py"
    target.write_text(GUARDED, encoding="utf-8")

    result = cli.invoke("rewrite", "--check", str(tmp_path))

    assert result.exit_code == EXIT_WOULD_CHANGE
    assert target.read_text(encoding="utf-8") == GUARDED
    assert "1 file(s) would be rewritten" in cli.output.getvalue()


def test_check_exits_zero_when_nothing_to_do(cli: _App, tmp_path: Path) -> None:
    (tmp_path / "pages.py").write_text("x = 1\n", encoding="utf-8")
    result = cli.invoke("rewrite", "--check", str(tmp_path))
    assert result.exit_code == EXIT_OK


def test_diff_prints_and_does_not_write(cli: _App, tmp_path: Path) -> None:
    target = tmp_path / "books.py"
    target.write_text(GUARDED, encoding="utf-8")

    result = cli.invoke("rewrite", "--diff", str(target))

    assert result.exit_code == EXIT_OK
    assert target.read_text(encoding="utf-8") == GUARDED
    output = cli.output.getvalue()
    assert "+    try:" in output
    assert "-@optimistic_locking" in output


def test_errors_exit_two(cli: _App, tmp_path: Path) -> None:
    target = tmp_path / "broken.py"
    target.write_text("def update(self)\n", encoding="utf-8")

    result = cli.invoke("rewrite", str(target))

    assert result.exit_code == EXIT_ERROR
    assert "Cannot parse module" in cli.output.getvalue()


def test_missing_path_exits_two(cli: _App, tmp_path: Path) -> None:
    result = cli.invoke("rewrite", str(tmp_path / "nowhere"))
    assert result.exit_code == EXIT_ERROR
    assert "No such file or directory" in cli.output.getvalue()


def test_show_config(tmp_path: Path) -> None:
    app = _App(GuardConfig(receiver="controller"))
    result = app.invoke("show-config")

    assert result.exit_code == EXIT_OK
    output = app.output.getvalue()
    assert "receiver" in output
    assert "'controller'" in output


def test_verbose_flag_is_accepted(cli: _App, tmp_path: Path) -> None:
    (tmp_path / "pages.py").write_text("x = 1\n", encoding="utf-8")
    result = cli.invoke("--verbose", "rewrite", str(tmp_path))
    assert result.exit_code == EXIT_OK
