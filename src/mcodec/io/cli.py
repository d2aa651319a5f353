from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from mcodec.core.bridge import decode_to_canonical, encode_from_canonical
from mcodec.core.errors import CodecError
from mcodec.core.serde import json_dumps_wire, json_loads
from mcodec.engine.errors import EngineError

from .config import ServiceSettings
from .server import serve

logger = logging.getLogger("mcodec.cli")


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="TOML config path (default: ./mcodec.toml, then ./pyproject.toml).",
    )
    p.add_argument(
        "--no-env",
        action="store_true",
        help="Do not auto-load .env (by default, .env is loaded if present).",
    )


def _setup(args: argparse.Namespace) -> ServiceSettings:
    """Load .env (unless disabled), resolve settings and configure stderr logging."""
    if not args.no_env:
        load_dotenv(Path(".env"))
    settings = ServiceSettings.load(args.config)
    logging.basicConfig(
        stream=sys.stderr,
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return settings


def _read_json(path: str) -> Any:
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    return json_loads(text)


def _cmd_serve(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="mcodec serve",
        description="Serve NDJSON Encode/Decode requests on stdin/stdout.",
    )
    p.add_argument(
        "--dispatch-mode",
        choices=("sequential", "concurrent"),
        default=None,
        help="Override the configured dispatch mode.",
    )
    _add_common(p)
    args = p.parse_args(argv)

    settings = _setup(args)
    if args.dispatch_mode is not None:
        settings = replace(settings, dispatch_mode=args.dispatch_mode)
    logger.info("serving with %s", settings)
    return serve(settings)


def _cmd_encode(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="mcodec encode", description="Encode a canonical JSON value to a Michelson tree."
    )
    p.add_argument("--schema", type=str, required=True, help="Path to the type expression JSON.")
    p.add_argument(
        "--data", type=str, required=True, help="Path to the canonical value JSON ('-' for stdin)."
    )
    _add_common(p)
    args = p.parse_args(argv)

    _setup(args)
    try:
        out = encode_from_canonical(_read_json(args.schema), _read_json(args.data))
    except (OSError, ValueError, EngineError, CodecError) as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    print(json_dumps_wire(out))
    return 0


def _cmd_decode(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="mcodec decode", description="Decode a Michelson tree to a canonical JSON value."
    )
    p.add_argument("--schema", type=str, required=True, help="Path to the type expression JSON.")
    p.add_argument(
        "--michelson", type=str, required=True, help="Path to the Michelson tree JSON ('-' for stdin)."
    )
    _add_common(p)
    args = p.parse_args(argv)

    _setup(args)
    try:
        out = decode_to_canonical(_read_json(args.schema), _read_json(args.michelson))
        text = json_dumps_wire(out)
    except (OSError, ValueError, TypeError, EngineError, CodecError) as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    print(text)
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mcodec", description="Michelson value codec service.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("serve")
    sub.add_parser("encode")
    sub.add_parser("decode")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    if cmd == "serve":
        code = _cmd_serve(rest)
    elif cmd == "encode":
        code = _cmd_encode(rest)
    elif cmd == "decode":
        code = _cmd_decode(rest)
    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
