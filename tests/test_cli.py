"""Tests for CLI argument parsing and command dispatch."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from baseline_lens import __version__
from baseline_lens.cli import EXIT_FAILURE, EXIT_OK, _build_parser, main


@pytest.fixture(autouse=True)
def _isolated_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Run each command from an empty directory with no env overrides."""
    for name in (
        "BASELINE_LENS_CONFIG_FILE",
        "BASELINE_LENS_COMPAT_DATA_PATH",
        "BASELINE_LENS_WEB_FEATURES_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    level = root.level
    yield
    # --silent / --verbose change the root level
    root.setLevel(level)


@pytest.fixture
def clean_project(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    root.mkdir()
    (root / "app.js").write_text("const a = new Map();\n")
    (root / "main.css").write_text(".a { display: grid; }\n")
    return root


class TestArgParser:
    def test_version_flag(self) -> None:
        args = _build_parser().parse_args(["--version"])
        assert args.version is True

    def test_analyze_defaults(self) -> None:
        args = _build_parser().parse_args(["analyze"])
        assert args.command == "analyze"
        assert args.path == "."
        assert args.config is None
        assert args.output is None
        assert args.format is None
        assert args.fail_on is None
        assert args.silent is False
        assert args.verbose is False

    def test_analyze_with_options(self) -> None:
        args = _build_parser().parse_args(
            [
                "analyze",
                "./web",
                "-c",
                "cfg.json",
                "-o",
                "out/report.xml",
                "-f",
                "junit",
                "--fail-on",
                "medium",
                "--threshold",
                "80",
                "--include",
                "src/**",
                "--exclude",
                "vendor/**",
                "-v",
            ]
        )
        assert args.path == "./web"
        assert args.config == "cfg.json"
        assert args.output == "out/report.xml"
        assert args.format == "junit"
        assert args.fail_on == "medium"
        assert args.threshold == 80
        assert args.include == "src/**"
        assert args.exclude == "vendor/**"
        assert args.verbose is True

    def test_silent_and_verbose_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["analyze", "--silent", "--verbose"])

    def test_bad_format_rejected(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["analyze", "-f", "yaml"])

    def test_list_features_defaults(self) -> None:
        args = _build_parser().parse_args(["list-features"])
        assert (args.type, args.status, args.format, args.limit) == (
            "all",
            "all",
            "table",
            None,
        )

    def test_init_config_defaults(self) -> None:
        args = _build_parser().parse_args(["init-config"])
        assert (args.path, args.preset, args.env, args.output) == (
            ".",
            None,
            "development",
            None,
        )
        assert args.dry_run is False

    def test_bad_preset_rejected(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["init-config", "--preset", "ember"])

    def test_no_command(self) -> None:
        assert _build_parser().parse_args([]).command is None


def test_version_output(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == f"baseline-lens {__version__}"


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == EXIT_OK
    assert "usage: baseline-lens" in capsys.readouterr().out


# ── analyze ──────────────────────────────────────────────


class TestAnalyze:
    def test_high_risk_fails(
        self, web_project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main(["analyze", str(web_project)])
        captured = capsys.readouterr()
        assert code == EXIT_FAILURE

        report = json.loads(captured.out)
        assert report["totalFiles"] == 4
        assert report["summary"]["totalFeatures"] == 16
        assert report["summary"]["riskDistribution"]["high"] == 2
        assert "Compatibility check failed: 2 high-risk features detected" in (
            captured.err
        )

    def test_clean_project_passes(
        self, clean_project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main(["analyze", str(clean_project), "--fail-on", "medium"])
        captured = capsys.readouterr()
        assert code == EXIT_OK
        assert json.loads(captured.out)["analyzedFiles"] == 2
        assert "Analyzed 2/2 files: 3 features" in captured.err

    def test_fail_on_low(
        self, clean_project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["analyze", str(clean_project), "--fail-on", "low"]) == (
            EXIT_FAILURE
        )
        assert "3 low-risk features detected" in capsys.readouterr().err

    def test_write_markdown(
        self,
        clean_project: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        target = tmp_path / "reports" / "compat.md"
        code = main(
            ["analyze", str(clean_project), "-f", "markdown", "-o", str(target)]
        )
        captured = capsys.readouterr()
        assert code == EXIT_OK
        assert captured.out == ""
        assert f"Report written to {target}" in captured.err
        assert target.read_text().startswith(
            "# Baseline Lens Compatibility Report"
        )

    def test_silent(
        self, clean_project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["analyze", str(clean_project), "--silent"]) == EXIT_OK
        captured = capsys.readouterr()
        assert json.loads(captured.out)["totalFiles"] == 2
        assert "Analyzed" not in captured.err

    def test_verbose_reports_progress(
        self, clean_project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main(["analyze", str(clean_project), "-v"])
        err = capsys.readouterr().err
        assert "[ 50%] Analyzed app.js" in err
        assert "[100%] Analyzed main.css" in err

    def test_config_file_format(
        self,
        clean_project: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        cfg = tmp_path / "cfg.json"
        cfg.write_text(json.dumps({"outputFormat": "junit"}))
        assert main(["analyze", str(clean_project), "-c", str(cfg)]) == EXIT_OK
        assert capsys.readouterr().out.startswith("<?xml")

    def test_default_config_file_in_cwd(
        self,
        clean_project: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / ".baseline-lens.json").write_text(
            json.dumps({"enabledAnalyzers": {"css": False}})
        )
        main(["analyze", str(clean_project)])
        report = json.loads(capsys.readouterr().out)
        assert report["summary"]["fileTypeBreakdown"] == {"javascript": 2}

    def test_include_override(
        self, clean_project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main(["analyze", str(clean_project), "--include", "**/*.css"])
        assert json.loads(capsys.readouterr().out)["totalFiles"] == 1

    def test_missing_config(
        self, clean_project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main(["analyze", str(clean_project), "-c", "nope.json"])
        assert code == EXIT_FAILURE
        assert "Error: Configuration file not found: nope.json" in (
            capsys.readouterr().err
        )

    def test_invalid_threshold(
        self, clean_project: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main(["analyze", str(clean_project), "--threshold", "150"])
        assert code == EXIT_FAILURE
        assert "Error: supportThreshold must be between 0 and 100" in (
            capsys.readouterr().err
        )

    def test_missing_path(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main(["analyze", str(tmp_path / "nowhere")])
        assert code == EXIT_FAILURE
        assert "Error: Path does not exist" in capsys.readouterr().err

    def test_unwritable_output(
        self,
        clean_project: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory\n")
        target = blocker / "report.json"
        code = main(["analyze", str(clean_project), "-o", str(target)])
        captured = capsys.readouterr()
        assert code == EXIT_FAILURE
        assert captured.out == ""
        assert f"Error: Failed to write report to {target}" in captured.err


# ── Configuration commands ───────────────────────────────


class TestConfigCommands:
    def test_validate_defaults(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["validate-config"]) == EXIT_OK
        assert "Configuration is valid." in capsys.readouterr().out

    def test_validate_invalid(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        cfg = tmp_path / "cfg.json"
        cfg.write_text(json.dumps({"failOn": "never", "maxFileSize": 10}))
        assert main(["validate-config", "-c", str(cfg)]) == EXIT_FAILURE
        err = capsys.readouterr().err
        assert "Error: failOn must be one of: high, medium, low" in err
        assert "Error: maxFileSize must be at least 1024 bytes (1KB)" in err

    def test_validate_warnings(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        cfg = tmp_path / "cfg.json"
        cfg.write_text(
            json.dumps(
                {
                    "enabledAnalyzers": {
                        "css": False,
                        "javascript": False,
                        "html": False,
                    }
                }
            )
        )
        assert main(["validate-config", "-c", str(cfg)]) == EXIT_OK
        assert "Warning: All analyzers are disabled" in capsys.readouterr().out

    def test_show_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["show-config"]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["failOn"] == "high"
        assert data["analysisTimeout"] == 5000

    def test_show_table(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["show-config", "-f", "table"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "supportThreshold: 90" in out
        assert "includePatterns: -" in out
        assert "enabledAnalyzers:\n  css: True" in out


# ── Feature commands ─────────────────────────────────────


class TestFeatureCommands:
    def test_feature_table(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["feature", "grid"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Feature: Grid" in out
        assert "Status: widely_available" in out

    def test_feature_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["feature", "api.fetch", "-f", "json"]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["key"] == "api.fetch"
        assert data["baselineStatus"] == "widely_available"

    def test_feature_not_found(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["feature", "css.properties.nope"]) == EXIT_FAILURE
        assert "Error: Feature not found: css.properties.nope" in (
            capsys.readouterr().err
        )

    def test_list_csv(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["list-features", "-t", "html", "-f", "csv", "--limit", "2"])
        assert code == EXIT_OK
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[0] == '"Name","Status","Description","MDN URL","Spec URL"'
        assert len(lines) == 3
        assert all(line.startswith('"html.') for line in lines[1:])

    def test_list_status_filter(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["list-features", "-s", "newly_available", "-f", "json"])
        data = json.loads(capsys.readouterr().out)
        assert data
        assert {d["baselineStatus"] for d in data} == {"newly_available"}


# ── Configuration generation ─────────────────────────────


class TestInitConfig:
    def test_writes_default_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"dependencies": {"vue": "^3.4.0"}})
        )
        assert main(["init-config"]) == EXIT_OK
        captured = capsys.readouterr()
        assert "Detected: vue project" in captured.err
        assert (
            "Configuration written to .baseline-lens.json "
            "(environment: development)"
        ) in captured.out

        data = json.loads((tmp_path / ".baseline-lens.json").read_text())
        assert data["supportThreshold"] == 80
        assert data["failOn"] == "low"
        assert data["includePatterns"][0] == "**/*.vue"

        assert main(["validate-config"]) == EXIT_OK

    def test_dry_run_with_preset(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main(
            ["init-config", "--preset", "angular", "--env", "staging", "--dry-run"]
        )
        assert code == EXIT_OK
        captured = capsys.readouterr()
        data = json.loads(captured.out)
        assert data["supportThreshold"] == 90
        assert data["failOn"] == "medium"
        assert "Detected: angular project" in captured.err
        assert not (tmp_path / ".baseline-lens.json").exists()

    def test_output_used_by_analyze(
        self,
        clean_project: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        target = tmp_path / "prod.json"
        code = main(
            [
                "init-config",
                "-p",
                str(clean_project),
                "--env",
                "production",
                "-o",
                str(target),
            ]
        )
        assert code == EXIT_OK
        data = json.loads(target.read_text())
        assert (data["supportThreshold"], data["failOn"]) == (95, "high")

        capsys.readouterr()
        assert main(["analyze", str(clean_project), "-c", str(target)]) == EXIT_OK
        assert json.loads(capsys.readouterr().out)["totalFiles"] == 2

    def test_unwritable_output(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory\n")
        target = blocker / "cfg.json"
        assert main(["init-config", "-o", str(target)]) == EXIT_FAILURE
        assert f"Error: Failed to write configuration to {target}" in (
            capsys.readouterr().err
        )

    def test_missing_project(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["init-config", "-p", "nowhere"]) == EXIT_FAILURE
        assert "Error: Path is not a directory: nowhere" in (
            capsys.readouterr().err
        )


class TestListPresets:
    def test_table(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["list-presets"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("Available Framework Presets:\n")
        assert (
            "REACT\n"
            "  Support Threshold: 92%\n"
            "  Browser Matrix: chrome >= 88, firefox >= 85, safari >= 14, "
            "edge >= 88\n"
            "  Include Patterns: 4 patterns"
        ) in out

    def test_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["list-presets", "-f", "json"]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert list(data) == ["react", "vue", "angular", "svelte"]
        assert data["svelte"]["supportThreshold"] == 88
