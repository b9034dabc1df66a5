"""CLI entrypoint for the coast miles feature pipeline."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from wsgiref.simple_server import make_server

from coastmiles.common.config_loader import PipelineSettings, load_settings
from coastmiles.common.constants import EXIT_HARD_FAIL, EXIT_NOT_FOUND, EXIT_SUCCESS
from coastmiles.common.errors import PipelineError
from coastmiles.common.http import HttpClient, RetryConfig, TimeoutConfig
from coastmiles.common.ids import generate_run_id
from coastmiles.common.logging import build_logger, log_event
from coastmiles.pipeline.runner import run_pipeline
from coastmiles.serve.endpoint import make_wsgi_app
from coastmiles.store.kv import CacheStore, build_store

COMMANDS = ("run", "show", "serve")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--config", default="./config/pipeline.yml")
    parser.add_argument("--overlay-config", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def build_http_client(settings: PipelineSettings) -> HttpClient:
    http = settings.http
    return HttpClient(
        timeout=TimeoutConfig(connect=float(http["connect_timeout"]), read=float(http["read_timeout"])),
        retry=RetryConfig(max_attempts=int(http["max_attempts"])),
        rate_per_sec=http.get("rate_per_sec"),
    )


def command_run(args: argparse.Namespace, settings: PipelineSettings, store: CacheStore, data_dir: Path) -> int:
    run_id = args.run_id or generate_run_id()
    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    log_event(logger, "run start", run_id=run_id, event="RUN_START", status="ok")
    try:
        with build_http_client(settings) as client:
            report = run_pipeline(
                settings,
                fetcher=client,
                store=store,
                logger=logger,
                run_id=run_id,
                data_dir=data_dir,
                fetch_source=client.get_text,
            )
    except PipelineError as exc:
        log_event(logger, f"run failed: {exc}", run_id=run_id, event="RUN_FAIL", status="error", error_code=exc.error_code)
        return EXIT_HARD_FAIL
    except Exception as exc:
        logger.exception(
            f"unexpected failure: {exc}",
            extra={"run_id": run_id, "event": "RUN_FAIL", "status": "error", "error_code": "UNEXPECTED_ERROR"},
        )
        return EXIT_HARD_FAIL
    log_event(logger, "run end", run_id=run_id, event="RUN_END", status="ok", rows_out=report.feature_count)
    return EXIT_SUCCESS


def command_show(settings: PipelineSettings, store: CacheStore) -> int:
    payload = store.get(settings.store["key"])
    if payload is None:
        print("No cached collection found.", file=sys.stderr)
        return EXIT_NOT_FOUND
    print(payload)
    return EXIT_SUCCESS


def command_serve(settings: PipelineSettings, store: CacheStore) -> int:
    app = make_wsgi_app(store, settings.store["key"])
    with make_server(settings.serve["host"], int(settings.serve["port"]), app) as server:
        print(f"Serving on http://{settings.serve['host']}:{settings.serve['port']}", file=sys.stderr)
        server.serve_forever()
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace, *, store: CacheStore | None = None) -> int:
    data_dir = Path(args.data_dir)
    overlay = Path(args.overlay_config) if args.overlay_config else None
    settings = load_settings(Path(args.config), overlay_path=overlay)
    store = store if store is not None else build_store(settings.store)

    if args.command == "run":
        return command_run(args, settings, store, data_dir)
    if args.command == "show":
        return command_show(settings, store)
    return command_serve(settings, store)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError as exc:
        print(f"{exc.error_code}: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
