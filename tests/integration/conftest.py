# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests.

Documents live on disk under tmp_path and are served by LocalDocumentStore;
Kroki is the FakeKroki transport from the top-level conftest. No network.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from adockroki.store.local_store import LocalDocumentStore

VAULT_FILES = {
    "index.adoc": (
        "= Handbook\n"
        ":toc:\n"
        "\n"
        "include::chapters/intro.adoc[leveloffset=+1]\n"
        "\n"
        "[plantuml, format=svg]\n"
        "----\n"
        "!include shared/style.puml\n"
        "Alice -> Bob: hello\n"
        "----\n"
        "\n"
        "include::chapters/missing.adoc[]\n"
    ),
    "chapters/intro.adoc": (
        "= Introduction\n"
        "\n"
        "include::details.adoc[leveloffset=+1]\n"
        "\n"
        "include::../snippets/code.adoc[tag=usage]\n"
    ),
    "chapters/details.adoc": "= Details\nSome details.\n",
    "snippets/code.adoc": (
        "ignored\n"
        "tag::usage[]\n"
        "adockroki render index.adoc\n"
        "end::usage[]\n"
        "also ignored\n"
    ),
    "shared/style.puml": "skinparam monochrome true\n",
    "graphs/flow.adoc": "[graphviz]\n----\ndigraph { a -> b }\n----\n",
}


def write_vault(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    write_vault(root, VAULT_FILES)
    return root


@pytest.fixture
def local_store(vault_dir: Path) -> LocalDocumentStore:
    return LocalDocumentStore(vault_dir)
