"""lindiff CLI: normalize lineage reports and compare JSON documents."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Any, Optional

from lindiff.codes import (
    DEFAULT_IGNORED_PROPERTIES,
    EXTENDED_IGNORED_PROPERTIES,
    DataframeShape,
    DiffStatus,
    FileMode,
    TotalPolicy,
)

_STATUS_MARKERS = {
    DiffStatus.SAME: " ",
    DiffStatus.ADDED: "+",
    DiffStatus.REMOVED: "-",
    DiffStatus.MODIFIED: "~",
}


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_ignored(args) -> list:
    if args.no_default_ignores:
        ignored = []
    elif args.extended_ignores:
        ignored = list(EXTENDED_IGNORED_PROPERTIES)
    else:
        ignored = list(DEFAULT_IGNORED_PROPERTIES)
    for key in args.ignore or []:
        if key not in ignored:
            ignored.append(key)
    return ignored


def _render_value(value: Any) -> str:
    from lindiff.kernel.values import MISSING

    if value is MISSING:
        return "<absent>"
    if value is None:
        return "null"
    if isinstance(value, (list, tuple)):
        return f"Array({len(value)})"
    if isinstance(value, dict):
        return "{...}"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _write_output(payload: Any, output_dir: Optional[Path], filename: str, quiet: bool) -> None:
    from ._internal.canonical_json import canonical_dumps, pretty_dumps

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        out_path = output_dir / filename
        out_path.write_text(canonical_dumps(payload) + "\n", encoding="utf-8")
        if not quiet:
            print(f"  Output: {out_path}")
    elif not quiet:
        print(pretty_dumps(payload))


def _add_ignore_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--ignore",
        action="append",
        default=None,
        metavar="KEY",
        help="Property name to exclude from comparison (repeatable)"
    )
    parser.add_argument(
        "--extended-ignores",
        action="store_true",
        help=f"Start from the extended ignore preset ({', '.join(EXTENDED_IGNORED_PROPERTIES)})"
    )
    parser.add_argument(
        "--no-default-ignores",
        action="store_true",
        help="Start from an empty ignore list instead of the default preset"
    )


def _add_mode_arguments(parser: argparse.ArgumentParser) -> None:
    modes = [mode.value for mode in FileMode]
    parser.add_argument(
        "--left-mode",
        choices=modes,
        default=FileMode.POST_PROCESS.value,
        help="pre-process: normalize the left report first; post-process: use as-is"
    )
    parser.add_argument(
        "--right-mode",
        choices=modes,
        default=FileMode.POST_PROCESS.value,
        help="pre-process: normalize the right report first; post-process: use as-is"
    )
    parser.add_argument(
        "--dataframe-shape",
        choices=[shape.value for shape in DataframeShape],
        default=DataframeShape.NAME.value,
        help="Layout of normalized dataframes (pre-process sides only)"
    )


def main():
    """Main CLI entry point for lindiff commands."""
    try:
        lindiff_version = get_version("lindiff")
    except PackageNotFoundError:
        lindiff_version = "dev"

    parser = argparse.ArgumentParser(
        prog="lindiff",
        description="lindiff: normalize lineage reports and compare JSON documents"
    )
    parser.add_argument("--version", action="version", version=f"lindiff {lindiff_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # normalize command
    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Normalize a lineage report into dataframe/operation form",
        parents=[parent_parser]
    )
    normalize_parser.add_argument(
        "report_path",
        type=Path,
        help="Path to lineage report JSON"
    )
    normalize_parser.add_argument(
        "--dataframe-shape",
        choices=[shape.value for shape in DataframeShape],
        default=DataframeShape.NAME.value,
        help="Layout of normalized dataframes"
    )
    normalize_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write normalized.json here instead of printing"
    )

    # compare command
    compare_parser = subparsers.add_parser(
        "compare",
        help="Compute similarity and diff status between two documents",
        parents=[parent_parser]
    )
    compare_parser.add_argument("left_path", type=Path, help="Path to left JSON")
    compare_parser.add_argument("right_path", type=Path, help="Path to right JSON")
    _add_mode_arguments(compare_parser)
    _add_ignore_arguments(compare_parser)
    compare_parser.add_argument(
        "--total-policy",
        choices=[policy.value for policy in TotalPolicy],
        default=TotalPolicy.LEFT.value,
        help="Count total properties from the left side only, or the larger side"
    )
    compare_parser.add_argument(
        "--show-diff",
        action="store_true",
        help="List every path that is not 'same'"
    )
    compare_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write comparison.json here"
    )

    # classify command
    classify_parser = subparsers.add_parser(
        "classify",
        help="Classify a single path between two documents",
        parents=[parent_parser]
    )
    classify_parser.add_argument("left_path", type=Path, help="Path to left JSON")
    classify_parser.add_argument("right_path", type=Path, help="Path to right JSON")
    classify_parser.add_argument(
        "--path",
        default="",
        help="Display path to classify (e.g. 'entire_report.dataframe.t1'); root when omitted"
    )
    classify_parser.add_argument(
        "--key",
        action="append",
        default=None,
        metavar="SEGMENT",
        help="One path segment, repeatable and followed in order (exact for keys containing '.'); overrides --path"
    )
    _add_mode_arguments(classify_parser)
    _add_ignore_arguments(classify_parser)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args.verbose, args.quiet)

    if args.command == "normalize":
        try:
            from .api import normalize
            from ._internal.io.documents import load_document

            report = load_document(args.report_path.resolve())
            merged = normalize(report, args.dataframe_shape)
            output_dir = args.output_dir.resolve() if args.output_dir else None
            if output_dir is not None and not args.quiet:
                print("[OK] Normalization complete")
            _write_output(merged, output_dir, "normalized.json", args.quiet)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)
    elif args.command == "compare":
        try:
            from .api import compare_files, diff_tree
            from .contracts import CompareOptions

            options = CompareOptions(
                ignored_properties=_resolve_ignored(args),
                total_policy=args.total_policy,
                dataframe_shape=args.dataframe_shape,
                left_mode=args.left_mode,
                right_mode=args.right_mode,
            )
            result = compare_files(
                args.left_path.resolve(),
                args.right_path.resolve(),
                options,
            )
            similarity = result.similarity

            changes = []
            if args.show_diff or args.output_dir:
                for entry in diff_tree(result.left, result.right, options.ignored_properties):
                    if entry.ignored or entry.status is DiffStatus.SAME:
                        continue
                    changes.append(entry)

            if not args.quiet:
                print(f"[{result.status.value.upper()}] Comparison complete")
                print(f"  Similarity: {similarity.similarity_percentage:.2f}%")
                print(f"  Matching properties: {similarity.matching_properties}")
                print(f"  Total properties: {similarity.total_properties}")
                if args.show_diff:
                    for entry in changes:
                        marker = _STATUS_MARKERS[entry.status]
                        print(
                            f"  {marker} {entry.path or 'root'}: "
                            f"{_render_value(entry.left)} -> {_render_value(entry.right)}"
                        )

            if args.output_dir:
                payload = {
                    "status": result.status.value,
                    "similarity": similarity.model_dump(by_alias=True),
                    "options": options.model_dump(mode="json"),
                    "changes": [
                        {"path": entry.path, "status": entry.status.value}
                        for entry in changes
                    ],
                }
                _write_output(payload, args.output_dir.resolve(), "comparison.json", args.quiet)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)
    elif args.command == "classify":
        try:
            from .api import diff_tree, locate, prepare_document
            from ._internal.io.documents import load_document

            ignored = _resolve_ignored(args)
            left = prepare_document(load_document(args.left_path.resolve()), args.left_mode, args.dataframe_shape)
            right = prepare_document(load_document(args.right_path.resolve()), args.right_mode, args.dataframe_shape)

            if args.key is not None:
                match = locate(left, right, args.key, ignored)
                requested = args.key
            else:
                # Display paths join keys with '.', so a key containing '.' can collide
                matches = [entry for entry in diff_tree(left, right, ignored) if entry.path == args.path]
                if len(matches) > 1:
                    print(
                        f"Error: path {args.path!r} is ambiguous ({len(matches)} nodes); "
                        "address it with one --key per segment",
                        file=sys.stderr
                    )
                    sys.exit(1)
                match = matches[0] if matches else None
                requested = args.path
            if match is None:
                print(f"Error: path not found in either document: {requested!r}", file=sys.stderr)
                sys.exit(1)

            if not args.quiet:
                label = match.path or "root"
                suffix = " (ignored)" if match.ignored else ""
                print(f"{label}: {match.status.value}{suffix}")
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
