"""CLI entry point — ``baseline-lens analyze`` and feature lookups."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from baseline_lens import __version__
from baseline_lens.config import Settings
from baseline_lens.constants import (
    BaselineStatus,
    ExportFormat,
    FeatureKind,
    RiskLevel,
)
from baseline_lens.errors import (
    ConfigError,
    DiscoveryError,
    KnowledgeBaseError,
)
from baseline_lens.logging_config import set_level, setup_logging
from baseline_lens.project_config import (
    ENVIRONMENTS,
    FRAMEWORK_PRESETS,
    AnalysisConfig,
    ConfigOverrides,
    detect_project,
    generate_config,
    load_config,
    save_config,
    split_patterns,
    validate_config,
)

EXIT_OK = 0
EXIT_FAILURE = 1


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"baseline-lens {__version__}")
        return EXIT_OK

    settings = Settings()
    setup_logging(settings.log_level)

    if args.command == "analyze":
        return _run_analyze(args, settings)
    if args.command == "validate-config":
        return _run_validate_config(args, settings)
    if args.command == "show-config":
        return _run_show_config(args, settings)
    if args.command == "init-config":
        return _run_init_config(args, settings)
    if args.command == "list-presets":
        return _run_list_presets(args)
    if args.command == "feature":
        return _run_feature(args, settings)
    if args.command == "list-features":
        return _run_list_features(args, settings)

    parser.print_help()
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="baseline-lens",
        description=(
            "Scan CSS, JavaScript and HTML for web platform features "
            "and report their Baseline browser support."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser(
        "analyze",
        help="Analyze a project for compatibility issues",
    )
    analyze.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )
    analyze.add_argument(
        "--config",
        "-c",
        default=None,
        help="Configuration file (default: .baseline-lens.json if present)",
    )
    analyze.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the report to this file instead of stdout",
    )
    analyze.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in ExportFormat],
        default=None,
        help="Report format (default: from configuration, else json)",
    )
    analyze.add_argument(
        "--fail-on",
        choices=[r.value for r in RiskLevel],
        default=None,
        help="Fail when features at this risk level are found",
    )
    analyze.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Support threshold percentage (0-100)",
    )
    analyze.add_argument(
        "--include",
        default=None,
        help="Comma-separated include globs (replaces configured ones)",
    )
    analyze.add_argument(
        "--exclude",
        default=None,
        help="Comma-separated exclude globs (added to configured ones)",
    )
    verbosity = analyze.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--silent",
        action="store_true",
        help="Only print the report and errors",
    )
    verbosity.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print progress and informational logs",
    )

    validate = sub.add_parser(
        "validate-config",
        help="Validate a configuration file",
    )
    validate.add_argument("--config", "-c", default=None)

    show = sub.add_parser(
        "show-config",
        help="Print the effective configuration",
    )
    show.add_argument("--config", "-c", default=None)
    show.add_argument(
        "--format",
        "-f",
        choices=["json", "table"],
        default="json",
    )

    init = sub.add_parser(
        "init-config",
        help="Generate a configuration file for a project",
    )
    init.add_argument(
        "--path",
        "-p",
        default=".",
        help="Project directory to inspect (default: current directory)",
    )
    init.add_argument(
        "--preset",
        choices=list(FRAMEWORK_PRESETS),
        default=None,
        help="Framework preset (default: detected from package.json)",
    )
    init.add_argument(
        "--env",
        choices=list(ENVIRONMENTS),
        default="development",
    )
    init.add_argument(
        "--output",
        "-o",
        default=None,
        help="Configuration file to write (default: .baseline-lens.json)",
    )
    init.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the configuration instead of writing it",
    )

    presets = sub.add_parser(
        "list-presets",
        help="List the framework presets used by init-config",
    )
    presets.add_argument(
        "--format",
        "-f",
        choices=["table", "json"],
        default="table",
    )

    feature = sub.add_parser(
        "feature",
        help="Show support details for one feature",
    )
    feature.add_argument(
        "feature_id",
        help="Compat-data key (css.properties.gap) or web-features id (grid)",
    )
    feature.add_argument(
        "--format",
        "-f",
        choices=["table", "json"],
        default="table",
    )

    list_features = sub.add_parser(
        "list-features",
        help="List features known to the knowledge base",
    )
    list_features.add_argument(
        "--type",
        "-t",
        choices=["all", *(k.value for k in FeatureKind)],
        default="all",
    )
    list_features.add_argument(
        "--status",
        "-s",
        choices=["all", *(s.value for s in BaselineStatus)],
        default="all",
    )
    list_features.add_argument(
        "--format",
        "-f",
        choices=["table", "json", "csv"],
        default="table",
    )
    list_features.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of features to list",
    )

    return parser


def _error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def _run_analyze(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the analyze command."""
    from baseline_lens.analysis.aggregator import (
        ci_messages,
        failure_message,
        should_fail,
    )
    from baseline_lens.analysis.pipeline import analyze_project
    from baseline_lens.export import export_report, write_report
    from baseline_lens.knowledge import load_knowledge_base
    from baseline_lens.report import build_report

    if args.verbose:
        set_level("INFO")
    elif args.silent:
        set_level("ERROR")

    overrides = ConfigOverrides(
        threshold=args.threshold,
        fail_on=args.fail_on,
        output_format=args.format,
        include=split_patterns(args.include),
        exclude=split_patterns(args.exclude),
    )
    try:
        config = load_config(args.config, overrides, settings)
    except ConfigError as exc:
        _error(str(exc))
        return EXIT_FAILURE

    validation = validate_config(config)
    if not args.silent:
        for warning in validation.warnings:
            print(f"Warning: {warning}", file=sys.stderr)
    if not validation.is_valid:
        for message in validation.errors:
            _error(message)
        return EXIT_FAILURE

    try:
        kb = load_knowledge_base(settings)
    except KnowledgeBaseError as exc:
        _error(str(exc))
        return EXIT_FAILURE

    def on_progress(percent: int, message: str) -> None:
        if args.verbose:
            print(f"  [{percent:3d}%] {message}", file=sys.stderr)

    project = Path(args.path)
    try:
        result = asyncio.run(
            analyze_project(
                project,
                config,
                kb,
                on_progress,
                settings=settings,
            )
        )
    except DiscoveryError as exc:
        _error(str(exc))
        return EXIT_FAILURE

    report = build_report(result, project_path=str(project.resolve()))
    fmt = config.output_format
    if args.output:
        try:
            target = write_report(report, args.output, fmt)
        except OSError as exc:
            _error(f"Failed to write report to {args.output}: {exc}")
            return EXIT_FAILURE
        if not args.silent:
            print(f"Report written to {target}", file=sys.stderr)
    else:
        print(export_report(report, fmt))

    if should_fail(result, config.fail_on):
        print(
            "Compatibility check failed: "
            f"{failure_message(result, config.fail_on)}",
            file=sys.stderr,
        )
        for line in ci_messages(result, config.fail_on):
            print(line, file=sys.stderr)
        return EXIT_FAILURE

    if not args.silent:
        risk = result.risk_distribution
        print(
            f"Analyzed {result.analyzed_files}/{result.total_files} files: "
            f"{len(result.features)} features "
            f"({risk.high} high, {risk.medium} medium, {risk.low} low risk)",
            file=sys.stderr,
        )
    return EXIT_OK


def _run_validate_config(args: argparse.Namespace, settings: Settings) -> int:
    try:
        config = load_config(args.config, settings=settings)
    except ConfigError as exc:
        _error(str(exc))
        return EXIT_FAILURE

    validation = validate_config(config)
    for warning in validation.warnings:
        print(f"Warning: {warning}")
    if not validation.is_valid:
        for message in validation.errors:
            _error(message)
        return EXIT_FAILURE
    print("Configuration is valid.")
    return EXIT_OK


def _run_show_config(args: argparse.Namespace, settings: Settings) -> int:
    try:
        config = load_config(args.config, settings=settings)
    except ConfigError as exc:
        _error(str(exc))
        return EXIT_FAILURE

    if args.format == "json":
        print(json.dumps(config.to_json_dict(), indent=2))
    else:
        print(_config_table(config))
    return EXIT_OK


def _config_table(config: AnalysisConfig) -> str:
    lines: list[str] = []
    for key, value in config.to_json_dict().items():
        if isinstance(value, dict):
            lines.append(f"{key}:")
            for sub_key, sub_value in value.items():
                lines.append(f"  {sub_key}: {sub_value}")
        elif isinstance(value, list):
            lines.append(f"{key}: {', '.join(map(str, value)) or '-'}")
        else:
            lines.append(f"{key}: {value}")
    return "\n".join(lines)


def _run_init_config(args: argparse.Namespace, settings: Settings) -> int:
    project = Path(args.path)
    if not project.is_dir():
        _error(f"Path is not a directory: {project}")
        return EXIT_FAILURE

    info = detect_project(project)
    if args.preset:
        info.framework = args.preset
    print(f"Detected: {info.framework or 'vanilla'} project", file=sys.stderr)

    config = generate_config(info, args.env)
    if args.dry_run:
        print(json.dumps(config.to_json_dict(), indent=2))
        return EXIT_OK

    target = Path(args.output) if args.output else settings.config_file
    try:
        save_config(config, target)
    except OSError as exc:
        _error(f"Failed to write configuration to {target}: {exc}")
        return EXIT_FAILURE
    print(f"Configuration written to {target} (environment: {args.env})")
    return EXIT_OK


def _run_list_presets(args: argparse.Namespace) -> int:
    if args.format == "json":
        print(json.dumps(FRAMEWORK_PRESETS, indent=2))
        return EXIT_OK

    lines = ["Available Framework Presets:", "=" * 28]
    for name, preset in FRAMEWORK_PRESETS.items():
        matrix = ", ".join(preset.get("customBrowserMatrix", [])) or "Default"
        lines.extend(
            [
                "",
                name.upper(),
                f"  Support Threshold: {preset['supportThreshold']}%",
                f"  Browser Matrix: {matrix}",
                "  Include Patterns: "
                f"{len(preset.get('includePatterns', []))} patterns",
            ]
        )
    print("\n".join(lines))
    return EXIT_OK


def _run_feature(args: argparse.Namespace, settings: Settings) -> int:
    from baseline_lens.analysis.catalog import describe_feature
    from baseline_lens.export import format_feature_info
    from baseline_lens.knowledge import load_knowledge_base

    try:
        kb = load_knowledge_base(settings)
    except KnowledgeBaseError as exc:
        _error(str(exc))
        return EXIT_FAILURE

    details = describe_feature(kb, args.feature_id)
    if details is None:
        _error(f"Feature not found: {args.feature_id}")
        return EXIT_FAILURE
    print(format_feature_info(details, args.format))
    return EXIT_OK


def _run_list_features(args: argparse.Namespace, settings: Settings) -> int:
    from baseline_lens.analysis.catalog import list_features
    from baseline_lens.export import format_feature_list
    from baseline_lens.knowledge import load_knowledge_base

    try:
        kb = load_knowledge_base(settings)
    except KnowledgeBaseError as exc:
        _error(str(exc))
        return EXIT_FAILURE

    features = list_features(kb, args.type, args.status, args.limit)
    print(format_feature_list(features, args.format))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
