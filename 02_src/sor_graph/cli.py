"""CLI entrypoint: build, validate and sync the System-of-Record graph."""

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import List

from .build import PipelineResult, build_graph, write_artifact
from .config import load_settings
from .errors import GraphBuildError
from .validator import ValidationReport, load_artifact, validate_graph


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Build and check the knowledge-graph artifact.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress at DEBUG level.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    build = subcommands.add_parser("build", help="Build the graph artifact from YAML records.")
    build.add_argument("--yaml-dir", type=Path, default=settings.yaml_dir, help="System-of-Record YAML directory.")
    build.add_argument("--output-path", type=Path, default=settings.output_path, help="Where to save graph JSON.")

    validate = subcommands.add_parser("validate", help="Check a graph artifact for structural integrity.")
    validate.add_argument(
        "--artifact-path", type=Path, default=settings.output_path, help="Graph JSON artifact to check."
    )

    sync = subcommands.add_parser("sync", help="Copy YAML records from a source directory.")
    sync.add_argument(
        "--source-dir",
        type=Path,
        default=settings.sync_source,
        required=settings.sync_source is None,
        help="Directory holding the authored YAML files.",
    )
    sync.add_argument("--yaml-dir", type=Path, default=settings.yaml_dir, help="Destination YAML directory.")

    args = parser.parse_args(argv)
    args.log_level = "DEBUG" if args.verbose else settings.log_level
    return args


def print_build_report(result: PipelineResult) -> None:
    stats = result.stats
    print("=== Node Counts by Type ===")
    for entity_type, count in stats.node_counts_by_type.items():
        print(f"  {entity_type}: {count}")
    print(f"  TOTAL canvas: {stats.canvas_node_count}")
    print(f"  TOTAL off-canvas: {stats.off_canvas_count}")

    print("\n=== Edge Counts ===")
    print(f"  Total: {stats.edge_count}")
    for edge_type, count in sorted(stats.edge_counts_by_type.items(), key=lambda item: -item[1]):
        print(f"  {edge_type}: {count}")

    print("\n=== Combo Membership ===")
    print(f"  Combos: {stats.combo_count}")
    for combo_id, count in stats.combo_membership.items():
        print(f"  {combo_id}: {count} members")

    if result.warnings:
        print(f"\n=== Warnings ({len(result.warnings)}) ===")
        for warning in result.warnings:
            print(f"  [{warning.source_entity}.{warning.field}] {warning.message}")


def print_validation_report(report: ValidationReport) -> None:
    checks = (
        ("Edge Reference Check", report.edge_reference_errors, "All edge references resolve."),
        ("Combo Reference Check", report.combo_reference_errors, "All combo references resolve."),
        ("Duplicate Edge ID Check", report.duplicate_edge_errors, "No duplicate edge IDs."),
    )
    for title, messages, ok_message in checks:
        print(f"=== {title} ===")
        for message in messages:
            print(f"  ERROR: {message}")
        if not messages:
            print(f"  OK: {ok_message}")
        print()

    print("=== Orphan Node Check ===")
    if report.warnings:
        print(f"  WARNING: {len(report.warnings)} orphan nodes (no edges):")
        for orphan in report.warnings:
            print(f"    {orphan}")
    else:
        print("  OK: No orphan nodes.")

    print("\n=== Summary ===")
    print(f"  Canvas nodes: {report.canvas_node_count}")
    print(f"  Off-canvas entities: {report.off_canvas_count}")
    print(f"  Edges: {report.edge_count}")
    print(f"  Combos: {report.combo_count}")
    print(f"  Errors: {len(report.errors)}")
    print(f"  Warnings: {len(report.warnings)}")
    print("\nVALIDATION PASSED." if report.passed else "\nVALIDATION FAILED.")


def run_build(yaml_dir: Path, output_path: Path) -> int:
    print("Building graph from YAML files...\n")
    try:
        result = build_graph(yaml_dir)
    except GraphBuildError as error:
        print(f"Build failed: {error}", file=sys.stderr)
        return 2
    path = write_artifact(result.graph, output_path)
    print(f"Wrote {path.resolve()}\n")
    print_build_report(result)
    print("\nDone.")
    return 0


def run_validate(artifact_path: Path) -> int:
    print(f"Validating {artifact_path}...\n")
    try:
        artifact = load_artifact(artifact_path)
    except GraphBuildError as error:
        print(f"Validation failed: {error}", file=sys.stderr)
        return 2
    report = validate_graph(artifact)
    print_validation_report(report)
    return 0 if report.passed else 1


def run_sync(source_dir: Path, yaml_dir: Path) -> int:
    if not source_dir.is_dir():
        print(f"Sync failed: source directory not found: {source_dir}", file=sys.stderr)
        return 2
    yaml_dir.mkdir(parents=True, exist_ok=True)
    copied = 0
    for source_file in sorted(source_dir.glob("*.yaml")):
        shutil.copy2(source_file, yaml_dir / source_file.name)
        copied += 1
        print(f"  Copied {source_file.name}")
    print(f"\nSynced {copied} YAML files from {source_dir}")
    return 0


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    if args.command == "build":
        return run_build(args.yaml_dir, args.output_path)
    if args.command == "validate":
        return run_validate(args.artifact_path)
    return run_sync(args.source_dir, args.yaml_dir)


if __name__ == "__main__":
    sys.exit(main())
