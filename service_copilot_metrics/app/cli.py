"""
Run the Copilot metrics pipeline once from the command line.

Intended for cron jobs and developer workstations. Settings come from the
environment (see ``config.py``); flags override them for a single run.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from shared.errors import PipelineException
from shared.logging import configure_logging

from .config import CopilotMetricsConfig, get_copilot_config
from .pipeline import run_pipeline


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Forward GitHub Copilot usage metrics to Datadog.")
    parser.add_argument("--team", action="append", dest="teams", default=None,
                        help="Team slug to process (repeatable); overrides GITHUB_TEAM_SLUGS")
    parser.add_argument("--skip-enterprise", action="store_true", help="Process team scopes only")
    parser.add_argument("--namespace", default=None, help="Root metric namespace override")
    parser.add_argument("--dry-run", action="store_true",
                        help="Flatten injected snapshots; do not call GitHub or Datadog")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args(argv)


def _config_from_args(args: argparse.Namespace) -> CopilotMetricsConfig:
    overrides = {}
    if args.teams:
        overrides["github_team_slugs"] = ",".join(args.teams)
    if args.skip_enterprise:
        overrides["skip_enterprise_metrics"] = True
    if args.namespace:
        overrides["datadog_metric_namespace"] = args.namespace
    if args.dry_run:
        overrides["mock_github_api"] = True
    return get_copilot_config(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        config = _config_from_args(args)
        configure_logging(config.service_name, config.log_level)
        summary = asyncio.run(run_pipeline(config))
    except KeyboardInterrupt:
        return 130
    except PipelineException as exc:
        print(f"[copilot-metrics] failed: {exc.message}", file=sys.stderr)
        return 2

    if config.verification_mode:
        print("[copilot-metrics] DRY RUN - nothing sent to Datadog")

    report = json.dumps(summary.to_dict(), indent=2)
    print(report)

    if args.output:
        try:
            args.output.write_text(report)
        except OSError as exc:
            print(f"[copilot-metrics] could not write summary to {args.output}: {exc}", file=sys.stderr)
            return 1

    return 0 if summary.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
