# tests/unit/test_unit_main.py — v1
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from adockroki.logging.logger import ROOT_LOGGER
from adockroki.main import _build_parser, main
from adockroki.pipeline.document_renderer import DocumentRenderer


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Isolated cwd and environment; restores the package logger afterwards."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CACHE_BACKEND", "json")
    monkeypatch.setenv("CACHE_PATH", str(tmp_path / "cache.json"))
    monkeypatch.setenv("INCLUDE_MARKERS", "false")
    monkeypatch.setenv("KROKI_BASE_URL", "https://kroki.test")

    root = logging.getLogger(ROOT_LOGGER)
    level, handlers = root.level, list(root.handlers)
    yield tmp_path
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def vault(tmp_path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    (root / "index.adoc").write_text(
        "= Doc\ninclude::part.adoc[leveloffset=+1]\n"
        "[plantuml]\n----\nA->B\n----\n",
        encoding="utf-8",
    )
    (root / "part.adoc").write_text("= Part\nbody\n", encoding="utf-8")
    return root


@pytest.fixture
def fake_open(monkeypatch, fake_kroki):
    """Route DocumentRenderer.open through the fake Kroki transport."""
    original = DocumentRenderer.open

    def _open(cls, settings, store, converter=None, transport=None):
        return original(settings, store, converter=converter, transport=fake_kroki.transport)

    monkeypatch.setattr(DocumentRenderer, "open", classmethod(_open))
    return fake_kroki


class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_render_subcommand(self):
        args = _build_parser().parse_args(
            ["render", "doc.adoc", "--root", "/vault", "-o", "out.html", "--html"]
        )
        assert args.command == "render"
        assert args.file == Path("doc.adoc")
        assert args.root == Path("/vault")
        assert args.output == Path("out.html")
        assert args.html is True

    def test_render_defaults(self):
        args = _build_parser().parse_args(["render", "doc.adoc"])
        assert args.root is None
        assert args.output is None
        assert args.html is False

    def test_cache_action_choices(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["cache", "purge"])


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_configuration_error(self, cli_env, monkeypatch, capsys):
        monkeypatch.setenv("KROKI_BASE_URL", "http://localhost:8000")
        assert main(["cache", "info"]) == 2
        assert "Configuration error" in capsys.readouterr().err

    def test_missing_file(self, cli_env):
        assert main(["compose", str(cli_env / "nope.adoc")]) == 1

    def test_file_outside_root(self, cli_env, vault, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        assert main(["compose", str(vault / "index.adoc"), "--root", str(other)]) == 1


class TestCompose:
    def test_writes_composed_text(self, cli_env, vault, capsys):
        out = cli_env / "out" / "composed.adoc"
        assert main(["compose", str(vault / "index.adoc"), "-o", str(out)]) == 0
        text = out.read_text(encoding="utf-8")
        assert text.startswith("= Doc\n== Part\nbody\n")
        assert "[plantuml]" in text
        assert "2 files read" in capsys.readouterr().err

    def test_stdout(self, cli_env, vault, capsys):
        assert main(["compose", str(vault / "index.adoc")]) == 0
        assert "== Part" in capsys.readouterr().out


class TestRender:
    def test_render_asciidoc(self, cli_env, vault, fake_open, capsys):
        out = cli_env / "rendered.adoc"
        assert main(["render", str(vault / "index.adoc"), "-o", str(out)]) == 0
        text = out.read_text(encoding="utf-8")
        assert "kroki-diagram-wrap" in text
        assert fake_open.bodies == ["A->B"]
        assert "1 rendered" in capsys.readouterr().err
        assert (cli_env / "cache.json").exists()

    def test_render_html(self, cli_env, vault, fake_open):
        out = cli_env / "preview.html"
        assert main(["render", str(vault / "index.adoc"), "-o", str(out), "--html"]) == 0
        html = out.read_text(encoding="utf-8")
        assert html.startswith("<!DOCTYPE html>")
        assert "<title>index.adoc</title>" in html

    def test_failures_exit_nonzero(self, cli_env, vault, fake_open):
        fake_open.responses["A->B"] = (400, b"Error 400: syntax")
        out = cli_env / "rendered.adoc"
        assert main(["render", str(vault / "index.adoc"), "-o", str(out)]) == 1
        assert "kroki-error" in out.read_text(encoding="utf-8")


class TestCache:
    def test_info_and_clear(self, cli_env, vault, fake_open, capsys):
        main(["render", str(vault / "index.adoc"), "-o", str(cli_env / "r.adoc")])
        capsys.readouterr()

        assert main(["cache", "info"]) == 0
        assert "Entries:    1 / 300" in capsys.readouterr().out

        assert main(["cache", "clear"]) == 0
        assert "Cleared 1 cached diagrams" in capsys.readouterr().out

        assert main(["cache", "info"]) == 0
        assert "Entries:    0 / 300" in capsys.readouterr().out
