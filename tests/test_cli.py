from pathlib import Path

import pytest

from backend_ai_rules.cli import main
from tests.conftest import AGENTS_TEXT


def _args(vendor_root, project_root, command, *extra):
    return [command, "--vendor-dir", str(vendor_root), "--target-dir", str(project_root), *extra]


def test_provision_command(vendor_root, project_root, capsys):
    assert main(_args(vendor_root, project_root, "provision")) == 0

    assert (project_root / "AGENTS.md").read_text(encoding="utf-8") == AGENTS_TEXT
    assert capsys.readouterr().out == "AGENTS.md copied to root directory.\n"


def test_provision_defaults_to_cwd(vendor_root, isolated_cwd):
    assert main(["provision", "--vendor-dir", str(vendor_root)]) == 0
    assert (isolated_cwd / "AGENTS.md").exists()


def test_provision_no_dev_is_a_successful_no_op(vendor_root, project_root, capsys):
    assert main(_args(vendor_root, project_root, "provision", "--no-dev")) == 0

    assert list(project_root.iterdir()) == []
    assert capsys.readouterr().out == ""


def test_provision_respects_no_dev_environment(vendor_root, project_root, monkeypatch):
    monkeypatch.setenv("AI_RULES_NO_DEV", "true")
    assert main(_args(vendor_root, project_root, "provision")) == 0
    assert list(project_root.iterdir()) == []


def test_provision_with_rules_flag(vendor_root, project_root):
    assert main(_args(vendor_root, project_root, "provision", "--with-rules")) == 0
    assert (project_root / ".ai-rules" / "openapi.md").exists()


def test_provision_reads_project_config(vendor_root, project_root):
    (project_root / ".ai-rules.yml").write_text(
        "rules:\n  copy: true\n  target: guidelines\n", encoding="utf-8"
    )

    assert main(_args(vendor_root, project_root, "provision")) == 0

    assert (project_root / "guidelines" / "unit-testing.md").exists()


def test_missing_source_exits_non_zero(tmp_path, project_root, capsys):
    assert main(_args(tmp_path, project_root, "provision")) == 1

    err = capsys.readouterr().err
    assert err.startswith("[ai-rules] Error: AGENTS.md not found at ")
    assert list(project_root.iterdir()) == []


def test_unwritable_target_exits_non_zero(vendor_root, tmp_path, capsys):
    assert main(_args(vendor_root, tmp_path / "missing", "provision")) == 1
    assert "cannot write" in capsys.readouterr().err


def test_bad_config_exits_non_zero(vendor_root, project_root, tmp_path, capsys):
    cfg = tmp_path / "bad.yml"
    cfg.write_text("layout: sideways\n", encoding="utf-8")

    assert main(["--config", str(cfg), *_args(vendor_root, project_root, "provision")]) == 1
    assert "unknown layout" in capsys.readouterr().err


def test_check_reports_then_passes(vendor_root, project_root, capsys):
    assert main(_args(vendor_root, project_root, "check")) == 1
    out = capsys.readouterr().out
    assert out.startswith("AGENTS.md provisioning needed:\n")
    assert f"missing: {project_root / 'AGENTS.md'}" in out

    main(_args(vendor_root, project_root, "provision"))
    capsys.readouterr()

    assert main(_args(vendor_root, project_root, "check")) == 0
    assert capsys.readouterr().out == "AGENTS.md up to date\n"


def test_check_does_not_write(vendor_root, project_root):
    main(_args(vendor_root, project_root, "check", "--with-rules"))
    assert list(project_root.iterdir()) == []


def test_command_is_required(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_mistyped_config_value_exits_non_zero(vendor_root, project_root, capsys):
    (project_root / ".ai-rules.yml").write_text("agents_file: 5\n", encoding="utf-8")

    assert main(_args(vendor_root, project_root, "provision")) == 1

    assert capsys.readouterr().err.startswith("[ai-rules] Error: 'agents_file'")
    assert not (project_root / "AGENTS.md").exists()


def test_check_unreadable_copy_exits_non_zero(vendor_root, project_root, capsys, monkeypatch):
    main(_args(vendor_root, project_root, "provision"))
    capsys.readouterr()
    target = project_root / "AGENTS.md"
    real_read_bytes = Path.read_bytes

    def read_bytes(self):
        if self == target:
            raise PermissionError(13, "Permission denied", str(self))
        return real_read_bytes(self)

    monkeypatch.setattr(Path, "read_bytes", read_bytes)

    assert main(_args(vendor_root, project_root, "check")) == 1
    assert capsys.readouterr().err.startswith(f"[ai-rules] Error: cannot read {target}")
