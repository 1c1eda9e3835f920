import json
import os
from pathlib import Path
from typing import List, Optional

import click
from dotenv import load_dotenv
from loguru import logger

from rowplan.agents.errors import GENERIC_FAILURE_MESSAGE, GenerationError
from rowplan.agents.scheduler import generate_workouts
from rowplan.client import RowPlanClient
from rowplan.export.csv_export import csv_filename, workouts_to_csv
from rowplan.logger import setup_logger
from rowplan.models.schemas import GeneratedWorkout, TrainingPeriod
from rowplan.state.period_store import PeriodStore, build_request_body


def _read_periods(path: str) -> List[TrainingPeriod]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    # Accept either a bare list or a request body {"periods": [...]}
    if isinstance(raw, dict):
        raw = raw.get("periods", [])
    return [TrainingPeriod(**p) for p in raw]


@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
def cli(log_level: Optional[str]):
    """RowPlan: rowing training periods in, CSV workout schedule out."""
    load_dotenv()
    setup_logger(log_level)


@cli.command()
@click.argument("periods_file")
@click.option("--count", default=1, show_default=True, help="Number of default periods to create")
def init(periods_file: str, count: int):
    """Write a periods file with default one-week blocks."""
    store = PeriodStore()
    for _ in range(count):
        store.add()
    Path(periods_file).write_text(json.dumps(build_request_body(store.periods), indent=2), encoding="utf-8")
    click.echo(f"Wrote {len(store)} period(s) → {periods_file}")


@cli.command()
@click.argument("periods_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--server", default=None, help="Base URL of a running RowPlan server (default: ROWPLAN_SERVER_URL)")
@click.option("--local", is_flag=True, help="Call the model in-process instead of through a server")
@click.option("--out", "out_dir", default=".", show_default=True, help="Directory for the CSV file")
def generate(periods_file: str, server: Optional[str], local: bool, out_dir: str):
    """Generate workouts for PERIODS_FILE and write rowing_plan_<date>.csv."""
    store = PeriodStore()
    try:
        store.load(_read_periods(periods_file))
    except (ValueError, TypeError, AttributeError) as e:
        logger.error(f"Could not read {periods_file}: {e}")
        raise click.ClickException(f"Invalid periods file: {periods_file}") from e

    for p in store.unbalanced():
        click.secho(f"Warning: '{p.name}' distribution totals {p.distribution.total}%, not 100%", fg="yellow", err=True)

    server = server or os.getenv("ROWPLAN_SERVER_URL", "http://localhost:3000")
    try:
        if local:
            workouts: List[GeneratedWorkout] = generate_workouts(store.periods)
        else:
            workouts = RowPlanClient(server).generate_workouts(build_request_body(store.periods))
    except GenerationError as e:
        logger.error(f"Generation failed [{e.kind.value}]: {e}")
        raise click.ClickException(GENERIC_FAILURE_MESSAGE) from e

    out_path = Path(out_dir) / csv_filename()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(workouts_to_csv(workouts), encoding="utf-8")
    click.echo(f"{len(workouts)} workouts generated → {out_path}")


@cli.command()
@click.option("--host", default=None, help="Bind address (default: ROWPLAN_HOST or 0.0.0.0)")
@click.option("--port", default=None, type=int, help="Port (default: ROWPLAN_PORT or 3000)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the web app."""
    from rowplan.main import run

    run(host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
