from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]

AGENTS_TEXT = "# AGENTS.md\n\nRead `.ai-rules/openapi.md` first.\n"
RULES = {
    "openapi.md": "# OpenAPI\n",
    "unit-testing.md": "# Unit tests\n",
    "nested/extra.md": "# Nested\n",
}


def _repo_root() -> Path:
    """Return repository root (tests/ is one level below)."""
    return _REPO_ROOT


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path_factory, monkeypatch):
    """Run every test from a unique temporary working directory."""
    tmp_path = tmp_path_factory.mktemp("cwd")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("AI_RULES_NO_DEV", raising=False)
    yield tmp_path


@pytest.fixture
def repo_root() -> Path:
    return _repo_root()


@pytest.fixture
def vendor_root(tmp_path_factory) -> Path:
    """Build a vendor tree shaped like an installed ``backend_ai_rules``."""
    root = tmp_path_factory.mktemp("vendor")
    package = root / "backend_ai_rules"
    (package / "rules" / "nested").mkdir(parents=True)
    (package / "AGENTS.md").write_text(AGENTS_TEXT, encoding="utf-8")
    for rel, text in RULES.items():
        (package / "rules" / rel).write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def project_root(tmp_path_factory) -> Path:
    return tmp_path_factory.mktemp("project")
