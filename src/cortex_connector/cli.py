"""Command-line interface for querying and driving a pool of Cortex instances."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, List, Optional

from .config import Settings
from .connector import CortexConnector
from .errors import ConnectorError

Command = Callable[[CortexConnector, argparse.Namespace], Awaitable[Any]]


async def _cmd_status(connector: CortexConnector, _args: argparse.Namespace) -> Any:
    return await connector.status()


async def _cmd_health(connector: CortexConnector, _args: argparse.Namespace) -> Any:
    health = await connector.health()
    return {"health": health.value}


async def _cmd_analyzers(connector: CortexConnector, args: argparse.Namespace) -> Any:
    if args.data_type:
        analyzers = await connector.router.analyzers_for(args.data_type)
    else:
        analyzers = await connector.router.list_analyzers()
    return [analyzer.model_dump() for analyzer in analyzers]


async def _cmd_analyzer(connector: CortexConnector, args: argparse.Namespace) -> Any:
    analyzer = await connector.router.get_analyzer(args.id)
    return analyzer.model_dump()


async def _cmd_job(connector: CortexConnector, args: argparse.Namespace) -> Any:
    job = await connector.router.get_job(args.id)
    return job.model_dump(mode="json")


async def _cmd_report(connector: CortexConnector, args: argparse.Namespace) -> Any:
    return await connector.router.get_job_report(args.id)


async def _cmd_submit(connector: CortexConnector, args: argparse.Namespace) -> Any:
    artifact = {}
    if args.data_type:
        artifact["data_type"] = args.data_type
    if args.data:
        artifact["data"] = args.data
    job = await connector.router.submit_job(
        args.analyzer, args.artifact, args.instance, **artifact
    )
    return job.model_dump(mode="json")


async def _run(
    command: Command,
    args: argparse.Namespace,
    settings: Settings,
    connector_factory: Callable[[Settings], CortexConnector],
) -> int:
    async with connector_factory(settings) as connector:
        try:
            result = await command(connector, args)
        except ConnectorError as exc:
            print(json.dumps({"ok": False, "error": exc.to_dict()}))
            return 1
    print(json.dumps(result, default=str, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cortex-connector", description="Cortex connector CLI"
    )
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("status", help="Composite status of all instances").set_defaults(
        func=_cmd_status
    )
    sub.add_parser("health", help="Composite health of all instances").set_defaults(
        func=_cmd_health
    )

    panalyzers = sub.add_parser("analyzers", help="List analyzers across instances")
    panalyzers.add_argument("--data-type", help="Only analyzers accepting this data type")
    panalyzers.set_defaults(func=_cmd_analyzers)

    panalyzer = sub.add_parser("analyzer", help="Get one analyzer")
    panalyzer.add_argument("--id", required=True)
    panalyzer.set_defaults(func=_cmd_analyzer)

    pjob = sub.add_parser("job", help="Get a job from whichever instance owns it")
    pjob.add_argument("--id", required=True)
    pjob.set_defaults(func=_cmd_job)

    preport = sub.add_parser("report", help="Get the report of a job")
    preport.add_argument("--id", required=True)
    preport.set_defaults(func=_cmd_report)

    psubmit = sub.add_parser("submit", help="Submit a job")
    psubmit.add_argument("--analyzer", required=True)
    psubmit.add_argument("--artifact", required=True)
    psubmit.add_argument("--instance", required=False)
    psubmit.add_argument("--data-type", required=False)
    psubmit.add_argument("--data", required=False)
    psubmit.set_defaults(func=_cmd_submit)

    return parser


def main(
    argv: Optional[List[str]] = None,
    connector_factory: Callable[[Settings], CortexConnector] = CortexConnector.from_settings,
) -> int:
    """Entry point for the Cortex connector CLI."""

    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    settings = Settings(_env_file=args.config)
    log_level = "DEBUG" if args.verbose else settings.log_level.upper()
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")
    logging.getLogger("cortex_connector").setLevel(log_level)
    return asyncio.run(_run(args.func, args, settings, connector_factory))


if __name__ == "__main__":
    raise SystemExit(main())
