"""semantic-memory CLI (Click commands).

Every command prints JSON to stdout; logs go to stderr.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from semantic_memory import __version__
from semantic_memory.client import SemanticMemoryClient, create_client
from semantic_memory.config.logging import configure_logging
from semantic_memory.config.settings import Settings, get_settings
from semantic_memory.core.exceptions import SemanticMemoryError
from semantic_memory.domain.entities import EmbedItem, ItemMetadata, RecallOptions
from semantic_memory.domain.enums import ItemType

T = TypeVar("T")


def _parse_metadata(pairs: tuple[str, ...]) -> dict[str, str]:
    metadata: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--meta")
        metadata[key] = value
    return metadata


def _run(settings: Settings, action: Callable[[SemanticMemoryClient], Awaitable[T]]) -> T:
    """Build a client, run ``action`` against it and close it."""

    async def _main() -> T:
        client = create_client(settings)
        try:
            return await action(client)
        finally:
            await client.close()

    try:
        return asyncio.run(_main())
    except SemanticMemoryError as e:
        raise click.ClickException(e.message) from e


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.version_option(__version__, prog_name="semantic-memory")
@click.option(
    "--storage-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the vector store (default from settings).",
)
@click.pass_context
def cli(ctx: click.Context, storage_path: Path | None) -> None:
    """Semantic storage and recall over free-text items."""
    settings = get_settings()
    if storage_path is not None:
        settings = settings.model_copy(update={"storage_path": storage_path})
    configure_logging(settings.log_level, settings.log_json)
    ctx.obj = settings


@cli.command("embed")
@click.argument("item_type", type=click.Choice([t.value for t in ItemType]))
@click.argument("content")
@click.option("--meta", "-m", multiple=True, help="Metadata as key=value (repeatable).")
@click.pass_obj
def embed_cmd(settings: Settings, item_type: str, content: str, meta: tuple[str, ...]) -> None:
    """Embed and store a single item."""
    if not content.strip():
        raise click.BadParameter("content must not be blank", param_hint="CONTENT")
    item = EmbedItem(
        type=ItemType(item_type),
        content=content,
        metadata=ItemMetadata.from_mapping(_parse_metadata(meta)),
    )
    _run(settings, lambda client: client.embed_one(item))
    _echo_json({"stored": 1, "type": item_type})


@cli.command("embed-batch")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def embed_batch_cmd(settings: Settings, source: Any) -> None:
    """Embed items from a JSON Lines file of {type, content, metadata}."""
    items: list[EmbedItem] = []
    for lineno, line in enumerate(source, 1):
        line = line.strip()
        if not line:
            continue
        try:
            items.append(EmbedItem.model_validate_json(line))
        except ValueError as e:
            raise click.ClickException(f"line {lineno}: {e}") from e

    _run(settings, lambda client: client.embed_batch(items))
    _echo_json({"stored": len(items)})


@cli.command("search")
@click.argument("query")
@click.option("--limit", "-l", type=int, default=None, help="Max results.")
@click.option("--threshold", "-t", type=float, default=None, help="Minimum similarity.")
@click.pass_obj
def search_cmd(
    settings: Settings, query: str, limit: int | None, threshold: float | None
) -> None:
    """Semantic search across every stored item."""
    results = _run(
        settings,
        lambda client: client.search(
            query,
            limit=limit if limit is not None else settings.default_limit,
            threshold=threshold if threshold is not None else settings.default_threshold,
        ),
    )
    _echo_json({
        "query": query,
        "total": len(results),
        "results": [r.model_dump(exclude_none=True) for r in results],
    })


@cli.command("recall")
@click.argument("category")
@click.argument("query")
@click.option("--limit", "-l", type=int, default=None, help="Max results.")
@click.option("--threshold", "-t", type=float, default=None, help="Minimum similarity.")
@click.option(
    "--context-window", "-w", type=int, default=None,
    help="Minutes of surrounding chat context (0 disables).",
)
@click.pass_obj
def recall_cmd(
    settings: Settings,
    category: str,
    query: str,
    limit: int | None,
    threshold: float | None,
    context_window: int | None,
) -> None:
    """Recall items of a category ("all", a type, or a platform)."""
    try:
        options = RecallOptions(
            limit=limit if limit is not None else settings.default_limit,
            threshold=threshold if threshold is not None else settings.default_threshold,
            context_window=(
                context_window if context_window is not None
                else settings.default_context_window
            ),
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    results = _run(settings, lambda client: client.recall(category, query, options))
    _echo_json({
        "category": category,
        "query": query,
        "total": len(results),
        "results": [r.model_dump(exclude_none=True) for r in results],
    })


@cli.command("stats")
@click.pass_obj
def stats_cmd(settings: Settings) -> None:
    """Approximate counts of stored items by type."""
    stats = _run(settings, lambda client: client.get_stats())
    _echo_json(stats.model_dump())


def main() -> None:
    """Entry point for the semantic-memory script."""
    cli()


if __name__ == "__main__":
    main()
