from bevy_site.hide_lines_cli import main, run_check, run_format

UNFORMATTED = "```rust\n# test\nfn f() {}\n```\n"
FORMATTED = "```rust,hide_lines=1\n# test\nfn f() {}\n```\n"


def test_no_subcommand_fails(capsys):
    assert main([]) == 1
    assert "No subcommand specified" in capsys.readouterr().err


def test_invalid_subcommand_fails(capsys):
    assert main(["bogus"]) == 1
    assert "Invalid subcommand 'bogus'" in capsys.readouterr().err


def test_check_without_folders_fails(capsys):
    assert run_check([]) == 1
    assert "no folder arguments" in capsys.readouterr().err


def test_format_without_folders_fails(capsys):
    assert run_format([]) == 1
    assert "no folder arguments" in capsys.readouterr().err


def test_check_reports_unformatted(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
    page = tmp_path / "page.md"
    page.write_text(UNFORMATTED, encoding="utf-8")
    assert main(["check", str(tmp_path)]) == 1
    out = capsys.readouterr().out
    assert "The following files are not formatted:" in out
    assert str(page) in out
    assert page.read_text(encoding="utf-8") == UNFORMATTED


def test_check_ci_output(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("GITHUB_ACTIONS", "true")
    (tmp_path / "page.md").write_text(UNFORMATTED, encoding="utf-8")
    assert main(["check", str(tmp_path)]) == 1
    out = capsys.readouterr().out
    assert "::group::Checking folder" in out
    assert "::endgroup::" in out
    assert "::error file=" in out


def test_format_then_check_passes(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
    page = tmp_path / "page.md"
    page.write_text(UNFORMATTED, encoding="utf-8")
    assert main(["format", str(tmp_path)]) == 0
    assert page.read_text(encoding="utf-8") == FORMATTED
    assert main(["check", str(tmp_path)]) == 0
    assert "All files are properly formatted." in capsys.readouterr().out


def test_missing_folder_fails(tmp_path, capsys):
    missing = tmp_path / "missing"
    assert main(["check", str(missing)]) == 1
    assert "Error:" in capsys.readouterr().err
    assert main(["format", str(missing)]) == 1