"""Command line entry point: serve or render a specification document."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn

from .app import create_app
from .html.render import HtmlRenderer
from .openapi import OpenAPI
from .spec.assemble import render_for_path
from .utils.config import DEBUG, AppSettings, RendererConfig
from .utils.errors import InvalidDocument, SpecRendererError

log = logging.getLogger("spec_renderer.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spec-renderer",
        description="Render an OpenAPI specification as JSON or HTML",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Serve the documentation over HTTP")
    serve.add_argument("document", type=Path, help="OpenAPI document (JSON or YAML)")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind address, default: 127.0.0.1")
    serve.add_argument("--port", type=int, default=8000, help="Port, default: 8000")
    serve.add_argument(
        "--standalone",
        action="store_true",
        help="Serve the document at /spec without generating API routes",
    )
    serve.add_argument("--debug", action="store_true", default=DEBUG, help="Enable debug logging")

    render = subparsers.add_parser("render", help="Write the rendered document")
    render.add_argument("document", type=Path, help="OpenAPI document (JSON or YAML)")
    render.add_argument("--format", choices=["json", "html"], default="json")
    render.add_argument("--path", dest="path_key", help="Only document this path key, e.g. /pets/{petId}")
    render.add_argument("--method", help="Together with --path, only document this method")
    render.add_argument("-o", "--output", type=Path, help="Output file, default: stdout")
    return parser


def _render(args: argparse.Namespace) -> str:
    openapi = OpenAPI.from_file(args.document)
    if args.path_key:
        partial = render_for_path(openapi.bundler, args.path_key, args.method)
        return json.dumps(partial, indent=2, ensure_ascii=False)
    if args.format == "html":
        renderer = HtmlRenderer(RendererConfig.from_env().template_dirs)
        return renderer.render(openapi.bundled)
    return json.dumps(openapi.bundled, indent=2, ensure_ascii=False)


def run(args: argparse.Namespace, *, logger: logging.Logger = log) -> int:
    if args.command == "serve":
        if args.debug:
            logger.setLevel(logging.DEBUG)
        settings = AppSettings(
            document=args.document,
            standalone=args.standalone,
            debug=args.debug,
            renderer=RendererConfig.from_env(),
        )
        app = create_app(settings)
        logger.info("[spec-renderer] Serving %s on http://%s:%s", args.document, args.host, args.port)
        uvicorn.run(app, host=args.host, port=int(args.port))
        return 0

    try:
        output = _render(args)
    except InvalidDocument as exc:
        for error in exc.errors:
            print(f"invalid document: {error}", file=sys.stderr)
        return 2
    except SpecRendererError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(output + "\n", encoding="utf-8")
        logger.info("[spec-renderer] Wrote %s", args.output)
    else:
        sys.stdout.write(output + "\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return run(args)


__all__ = ["build_parser", "main", "run"]


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
