"""Filter CLI commands."""

import json
from pathlib import Path
from typing import Any, TextIO

import click
from pydantic import ValidationError

from binchotan.cli.output import OutputFormatter
from binchotan.core.errors import BinchotanError, create_error
from binchotan.core.logging import ProgressReporter, error
from binchotan.filters.loader import FilterLoader
from binchotan.filters.runner import FilterRunner, Keep
from binchotan.models.error import ErrorCode
from binchotan.models.tweet import Tweet

POST_COLUMNS = ["id", "user.screen_name", "full_text", "text"]
FILTER_COLUMNS = ["name", "author", "entrypoint", "description"]


def _read_posts(stream: TextIO) -> list[Tweet]:
    """Read posts given as a JSON object, a JSON array or JSON lines."""
    text = stream.read().strip()
    if not text:
        return []

    data: Any
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = [json.loads(line) for line in text.splitlines() if line.strip()]

    if not isinstance(data, list):
        data = [data]
    return [Tweet.model_validate(item) for item in data]


@click.command("list")
@click.pass_context
def list_filters(ctx: click.Context) -> None:
    """Load the filter repository and list its filters."""
    formatter: OutputFormatter = ctx.obj["formatter"]
    filters_dir = Path(ctx.obj["filters_dir"])

    try:
        filters = FilterLoader(filters_dir).load()
    except BinchotanError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)

    formatter.records(
        [{**f.meta.model_dump(), "path": str(f.path)} for f in filters],
        columns=FILTER_COLUMNS,
        title=f"Filters in {filters_dir}",
    )


@click.command()
@click.argument("name")
@click.argument("input", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=4,
    show_default=True,
    help="Posts filtered in parallel",
)
@click.pass_context
def run(ctx: click.Context, name: str, input: TextIO, workers: int) -> None:
    """Run filter NAME over the posts in INPUT (default: stdin).

    INPUT holds one post as a JSON object, several as a JSON array, or
    one JSON object per line. Kept posts are written to stdout.
    """
    formatter: OutputFormatter = ctx.obj["formatter"]
    filters_dir = Path(ctx.obj["filters_dir"])

    try:
        posts = _read_posts(input)
    except (json.JSONDecodeError, ValidationError) as e:
        formatter.error(
            create_error(
                code=ErrorCode.INVALID_INPUT,
                message=f"Could not read posts: {e}",
                remediation="Pass tweets as JSON or JSON lines",
            ).model_dump(mode="json", exclude_none=True)
        )
        ctx.exit(2)

    try:
        filter = FilterLoader(filters_dir).get(name)
    except BinchotanError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)

    progress = ProgressReporter(description=f"Filter '{name}'")
    results = FilterRunner().run_batch(filter, posts, max_workers=workers)

    kept = []
    for index, result in enumerate(results):
        if not result.success:
            error(f"post #{index}: {result.error}", index=index)
            progress.update(failed=1)
        elif isinstance(result.outcome, Keep):
            kept.append(result.outcome.post)
            progress.update(kept=1)
        else:
            progress.update(dropped=1)

    formatter.records(kept, columns=POST_COLUMNS, title="Kept posts")
    progress.finish()

    if progress.failed:
        ctx.exit(1)
