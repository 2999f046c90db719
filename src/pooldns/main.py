from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .client import Client
from .config import ConfigError, ClientConfig, build_client, init_logging, load_config
from .config.config_parser import parse_config
from .errors import ResolutionError
from .records import qtype_code

MODES = ("simple", "raw", "enrich")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pooldns",
        description="Resolve a hostname against a pool of DNS resolvers with retries",
    )
    parser.add_argument("host", help="Hostname to resolve")
    parser.add_argument("--config", help="Path to YAML config")
    parser.add_argument(
        "-r",
        "--resolver",
        action="append",
        dest="resolvers",
        help="Resolver host[:port]; repeat to build a pool (overrides config)",
    )
    parser.add_argument("--retries", type=int, help="Maximum attempts per resolution")
    parser.add_argument("--timeout-ms", type=int, help="Per-exchange timeout")
    parser.add_argument(
        "-t", "--type", default="A", help="Record type for raw/enrich modes (default A)"
    )
    parser.add_argument("--mode", choices=MODES, default="simple")
    parser.add_argument(
        "--retry-transport",
        action="store_true",
        help="In enrich mode, rotate resolvers on transport errors",
    )
    parser.add_argument("--log-level", help="debug, info, warning, error or critical")
    return parser


def _resolve_config(args: argparse.Namespace) -> ClientConfig:
    """
    Brief: Merge the optional config file with CLI overrides.

    Inputs:
      - args: Parsed CLI namespace.

    Outputs:
      - ClientConfig; CLI values win over file values.
    """
    base: Dict[str, Any] = {}
    if args.config:
        base = load_config(args.config).model_dump()
    if args.resolvers:
        base["resolvers"] = args.resolvers
    if args.retries is not None:
        base["max_retries"] = args.retries
    if args.timeout_ms is not None:
        base["timeout_ms"] = args.timeout_ms
    if args.log_level:
        base["logging"] = {**base.get("logging", {}), "level": args.log_level}
    return parse_config(base)


def run(client: Client, args: argparse.Namespace) -> Dict[str, Any]:
    """
    Brief: Dispatch one resolution according to --mode.

    Outputs:
      - JSON-serializable dict; raises ResolutionError on failure.
    """
    if args.mode == "simple":
        return dataclasses.asdict(client.resolve(args.host))
    if args.mode == "raw":
        return dataclasses.asdict(client.resolve_raw(args.host, args.type))

    result, err = client.resolve_enrich(
        args.host, args.type, retry_transport=args.retry_transport
    )
    out = dataclasses.asdict(result)
    if err is not None:
        out["error"] = str(err)
        err.result = out
        raise err
    return out


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the pooldns CLI.

    Args:
        argv: Command-line arguments.

    Returns:
        0 on success, 1 on resolution failure, 2 on configuration errors.

    Example use:
        CLI:
            pooldns -r 1.1.1.1 -r 8.8.8.8 --mode raw -t MX example.com
    """
    args = _build_parser().parse_args(argv)

    try:
        cfg = _resolve_config(args)
        client = build_client(cfg)
        qtype_code(args.type)
    except (ConfigError, ValueError) as exc:
        print(f"pooldns: {exc}", file=sys.stderr)
        return 2

    init_logging(cfg.logging)
    logger = logging.getLogger("pooldns.main")
    logger.debug(
        "Resolving %s (%s) via %s with %d attempt(s)",
        args.host,
        args.mode,
        ", ".join(cfg.resolvers),
        cfg.max_retries,
    )

    try:
        out = run(client, args)
    except ResolutionError as exc:
        logger.error("Resolution of %s failed: %s", args.host, exc)
        partial = exc.result
        if dataclasses.is_dataclass(partial):
            partial = dataclasses.asdict(partial)
        if isinstance(partial, dict):
            print(json.dumps(partial, indent=2))
        return 1

    print(json.dumps(out, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
