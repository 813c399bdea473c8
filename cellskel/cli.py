"""CLI entrypoints for cellskel commands."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Sequence

from .config import CellSkelConfig, ConfigError, load_config
from .engine import SkeletonEngine, skeletonize_documents
from .loaders import DocumentLoadError, load_cells
from .logging import configure_logging, get_logger
from .models import SkeletonResult


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit results as JSON instead of skeleton text.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .cellskel.yml or the directory containing it (defaults to the document's directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cellskel",
        description="Compress notebook and script cells into prompt-sized skeletons.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    skeleton_parser = subparsers.add_parser(
        "skeletonize",
        help="Skeletonize the cells of a single notebook or script.",
    )
    _add_verbose_option(skeleton_parser, suppress_default=True)
    _add_output_options(skeleton_parser)
    skeleton_parser.add_argument("path", help="Notebook (.ipynb) or script to process.")
    skeleton_parser.add_argument(
        "--language",
        default=None,
        help="Override the language label used in statistics lines.",
    )

    batch_parser = subparsers.add_parser(
        "batch",
        help="Skeletonize several documents in parallel.",
    )
    _add_verbose_option(batch_parser, suppress_default=True)
    _add_output_options(batch_parser)
    batch_parser.add_argument("paths", nargs="+", help="Documents to process.")
    batch_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum number of documents processed concurrently.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP skeletonization service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cellskel commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))
    logger = get_logger("cli")

    if args.command == "skeletonize":
        path = Path(args.path)
        try:
            config = _load_config_for(args.config, path)
            _configure_log_file(config, verbose=bool(args.verbose))
            cells = load_cells(path, language=args.language)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except (ConfigError, DocumentLoadError) as exc:
            parser.exit(1, f"cellskel skeletonize failed: {exc}\n")
        logger.debug("Loaded %d cells from %s", len(cells), path)
        results = SkeletonEngine(config.engine).skeletonize_document(cells)
        if args.json:
            print(json.dumps([_result_to_dict(result) for result in results], indent=2))
        else:
            print(_render_results(results))
    elif args.command == "batch":
        paths = [Path(item) for item in args.paths]
        try:
            config = _load_config_for(args.config, paths[0])
            _configure_log_file(config, verbose=bool(args.verbose))
            documents = [load_cells(path) for path in paths]
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except (ConfigError, DocumentLoadError) as exc:
            parser.exit(1, f"cellskel batch failed: {exc}\n")
        workers = args.workers or config.workers
        batches = skeletonize_documents(documents, settings=config.engine, max_workers=workers)
        if args.json:
            payload = {
                str(path): [_result_to_dict(result) for result in results]
                for path, results in zip(paths, batches)
            }
            print(json.dumps(payload, indent=2))
        else:
            for path, results in zip(paths, batches):
                print(f"## {path}")
                print(_render_results(results))
                print()
    elif args.command == "serve":
        from .service import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:  # pragma: no cover - integration path
            parser.exit(1, f"cellskel serve failed: {exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load_config_for(config_arg: str | None, document: Path) -> CellSkelConfig:
    if config_arg:
        return load_config(Path(config_arg))
    return load_config(document.expanduser().resolve().parent)


def _configure_log_file(config: CellSkelConfig, *, verbose: bool) -> None:
    if config.log_file is not None:
        configure_logging(verbose=verbose, log_file=config.log_file)


def _render_results(results: Sequence[SkeletonResult]) -> str:
    blocks: List[str] = []
    for result in results:
        blocks.append(f"# ---- Cell {result.index} ----\n{result.text}")
    return "\n\n".join(blocks)


def _result_to_dict(result: SkeletonResult) -> dict[str, object]:
    data = asdict(result)
    if result.variant_of is not None:
        data["variant_of"] = {"bucket": result.variant_of[0], "index": result.variant_of[1]}
    return data


if __name__ == "__main__":
    main(sys.argv[1:])
