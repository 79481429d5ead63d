"""Command-line interface for the users service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Dict, Sequence

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Execute `pip install -e .` to install dependencies."
    ) from exc

from users_api.config import Settings, load_settings

logger = logging.getLogger("usersapi.main")

_DEFAULT_SERVICE_URL = "http://127.0.0.1:3030"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="In-memory users service")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP users service")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: 3030)",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: config/users_api.yaml)",
    )
    serve_parser.add_argument(
        "--service-name",
        default=None,
        help="Name reported by the health endpoint",
    )
    serve_parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level for the service and uvicorn (default: info)",
    )

    health_parser = subparsers.add_parser(
        "health", help="Query the health endpoint of a running service"
    )
    health_parser.add_argument(
        "--service-url",
        default=_DEFAULT_SERVICE_URL,
        help=f"Base URL of a running users service (default: {_DEFAULT_SERVICE_URL})",
    )
    health_parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Seconds to wait for a response (default: 5)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "health"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _resolve_settings(args: argparse.Namespace) -> Settings:
    try:
        settings = load_settings(args.config)
        overrides: Dict[str, object] = {
            "host": args.host,
            "port": args.port,
            "service_name": args.service_name,
            "log_level": args.log_level,
        }
        return Settings.from_dict(overrides, settings)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc


def _serve(settings: Settings) -> None:
    from users_api.service import create_app
    import uvicorn

    logger.info(
        "Starting %s on http://%s:%s", settings.service_name, settings.host, settings.port
    )

    app = create_app(settings=settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


def _check_health(service_url: str, *, timeout: float) -> int:
    endpoint = service_url.rstrip("/") + "/health"

    try:
        response = httpx.get(endpoint, timeout=timeout)
    except httpx.HTTPError as exc:
        print(f"Failed to contact users service: {exc}")
        return 1

    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return 1

    try:
        payload = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return 1

    if not isinstance(payload, dict):
        print("Service returned an unexpected response format.")
        return 1

    service = payload.get("service", "unknown-service")
    state = payload.get("status", "unknown")
    print(f"{service} at {service_url} is {state}")
    return 0 if state == "healthy" else 1


def _log_level_number(name: str) -> int:
    # uvicorn's "trace" level has no stdlib counterpart.
    if name == "trace":
        return logging.DEBUG
    return getattr(logging, name.upper(), logging.INFO)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    if args.command == "serve":
        settings = _resolve_settings(args)
        logging.basicConfig(
            level=_log_level_number(settings.log_level),
            format="%(asctime)s [%(levelname)s] %(message)s",
        )
        _serve(settings)
    elif args.command == "health":
        logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
        sys.exit(_check_health(args.service_url, timeout=args.timeout))


if __name__ == "__main__":
    main()
