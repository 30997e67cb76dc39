"""MCP Server for semantic-memory.

Exposes the memory operations (embed, embed_batch, search, recall, stats)
as tools for AI agents via the Model Context Protocol.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
from mcp.server.fastmcp import FastMCP

from semantic_memory.client import SemanticMemoryClient
from semantic_memory.domain.entities import EmbedItem, RecallOptions

mcp = FastMCP(
    "semantic-memory",
    instructions="Semantic storage and recall over chat, code, conversation and documents.",
)

# --- Lazy-initialized client ---

_client: SemanticMemoryClient | None = None
_settings: Any = None


async def _get_client() -> SemanticMemoryClient:
    """Lazy-init: build the client from settings on first use."""
    global _client, _settings

    if _client is not None:
        return _client

    from semantic_memory.client import create_client
    from semantic_memory.config.logging import configure_logging
    from semantic_memory.config.settings import get_settings

    _settings = get_settings()
    configure_logging(_settings.log_level, _settings.log_json)
    _client = create_client(_settings)
    await _client.initialize()
    return _client


def _defaults() -> tuple[int, float, int]:
    if _settings is None:
        from semantic_memory.domain.entities import (
            DEFAULT_CONTEXT_WINDOW,
            DEFAULT_LIMIT,
            DEFAULT_THRESHOLD,
        )

        return DEFAULT_LIMIT, DEFAULT_THRESHOLD, DEFAULT_CONTEXT_WINDOW
    return (
        _settings.default_limit,
        _settings.default_threshold,
        _settings.default_context_window,
    )


def _result_dict(result: Any) -> dict[str, Any]:
    data = {
        "content": result.content,
        "similarity": round(result.similarity, 4),
        "metadata": result.metadata,
    }
    if result.context is not None:
        data["context"] = [_result_dict(c) for c in result.context]
    return data


# --- MCP Tools ---


@mcp.tool()
async def memory_embed(
    type: str,
    content: str,
    metadata: dict[str, Any] | None = None,
) -> str:
    """Store a piece of text in semantic memory.

    Args:
        type: Item category - "chat", "code", "conversation" or "document".
        content: The text to embed.
        metadata: Optional metadata such as platform, username, timestamp.
    """
    client = await _get_client()
    item = EmbedItem(type=type, content=content, metadata=metadata or {})
    await client.embed_one(item)
    return json.dumps({"stored": 1, "type": item.type.value})


@mcp.tool()
async def memory_embed_batch(items: list[dict[str, Any]]) -> str:
    """Store several items with a single embedding request.

    Args:
        items: Objects with "type", "content" and optional "metadata".
    """
    client = await _get_client()
    parsed = [EmbedItem.model_validate(item) for item in items]
    await client.embed_batch(parsed)
    return json.dumps({"stored": len(parsed)})


@mcp.tool()
async def memory_search(
    query: str,
    limit: int | None = None,
    threshold: float | None = None,
) -> str:
    """Search semantic memory for items similar in meaning to the query.

    Args:
        query: Natural language search query.
        limit: Maximum number of results (default 10).
        threshold: Minimum similarity score (default 0.7).
    """
    client = await _get_client()
    default_limit, default_threshold, _ = _defaults()

    results = await client.search(
        query,
        limit=limit if limit is not None else default_limit,
        threshold=threshold if threshold is not None else default_threshold,
    )
    return json.dumps({
        "query": query,
        "total": len(results),
        "results": [_result_dict(r) for r in results],
    }, default=str)


@mcp.tool()
async def memory_recall(
    category: str,
    query: str,
    limit: int | None = None,
    threshold: float | None = None,
    context_window: int | None = None,
) -> str:
    """Recall memories of one category, with surrounding chat context.

    Args:
        category: "all", an item type ("chat", "code", ...) or a platform name.
        query: Natural language search query.
        limit: Maximum number of results (default 10).
        threshold: Minimum similarity score (default 0.7).
        context_window: Minutes of surrounding chat messages to attach (default 3, 0 disables).
    """
    client = await _get_client()
    default_limit, default_threshold, default_window = _defaults()

    options = RecallOptions(
        limit=limit if limit is not None else default_limit,
        threshold=threshold if threshold is not None else default_threshold,
        context_window=context_window if context_window is not None else default_window,
    )
    results = await client.recall(category, query, options)
    return json.dumps({
        "category": category,
        "query": query,
        "total": len(results),
        "results": [_result_dict(r) for r in results],
    }, default=str)


@mcp.tool()
async def memory_stats() -> str:
    """Approximate number of stored items, by type."""
    client = await _get_client()
    stats = await client.get_stats()
    return json.dumps(stats.model_dump())


# --- CLI fallback ---


@click.group()
def mcp_cli() -> None:
    """semantic-memory MCP Server CLI (for testing)."""
    pass


@mcp_cli.command("embed")
@click.argument("item_type")
@click.argument("content")
@click.option("--meta", "-m", multiple=True, help="Metadata as key=value (repeatable)")
def cli_embed(item_type: str, content: str, meta: tuple[str, ...]) -> None:
    """Store a single item."""
    metadata = dict(pair.partition("=")[::2] for pair in meta)
    result = asyncio.run(memory_embed(type=item_type, content=content, metadata=metadata))
    click.echo(json.dumps(json.loads(result), indent=2))


@mcp_cli.command("embed-batch")
@click.argument("source", type=click.File("r", encoding="utf-8"))
def cli_embed_batch(source) -> None:
    """Store items from a JSON Lines file."""
    items = [json.loads(line) for line in source if line.strip()]
    result = asyncio.run(memory_embed_batch(items=items))
    click.echo(json.dumps(json.loads(result), indent=2))


@mcp_cli.command("search")
@click.argument("query")
@click.option("--limit", "-l", default=None, type=int, help="Max results")
@click.option("--threshold", "-t", default=None, type=float, help="Minimum similarity")
def cli_search(query: str, limit: int | None, threshold: float | None) -> None:
    """Search semantic memory."""
    result = asyncio.run(memory_search(query=query, limit=limit, threshold=threshold))
    click.echo(json.dumps(json.loads(result), indent=2))


@mcp_cli.command("recall")
@click.argument("category")
@click.argument("query")
@click.option("--limit", "-l", default=None, type=int, help="Max results")
@click.option("--context-window", "-w", default=None, type=int, help="Context minutes")
def cli_recall(category: str, query: str, limit: int | None, context_window: int | None) -> None:
    """Recall memories of a category."""
    result = asyncio.run(
        memory_recall(category=category, query=query, limit=limit, context_window=context_window)
    )
    click.echo(json.dumps(json.loads(result), indent=2))


@mcp_cli.command("stats")
def cli_stats() -> None:
    """Show memory statistics."""
    result = asyncio.run(memory_stats())
    click.echo(json.dumps(json.loads(result), indent=2))


# --- Entry points ---


def main() -> None:
    """Entry point for the semantic-memory-mcp script.

    ``--cli`` as the first argument runs the test CLI instead of the server.
    """
    if len(sys.argv) > 1 and sys.argv[1] == "--cli":
        sys.argv.pop(1)
        mcp_cli()
    else:
        mcp.run()


if __name__ == "__main__":
    main()
