"""
Command-line interface for the Game Catalog.

Provides commands to search, browse and maintain the catalog manually.
"""

import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from game_catalog.config import get_settings
from game_catalog.logger import get_logger, setup_logging

# Initialize logging
setup_logging()
logger = get_logger(__name__, component="cli")


class CLIOutput(BaseModel):
    """Structured output for CLI commands."""

    success: bool
    command: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data: dict[str, Any] | list[Any] | None = None
    error: str | None = None


def print_json(output: CLIOutput) -> None:
    """Print output as formatted JSON."""
    print(json.dumps(output.model_dump(mode="json"), indent=2, default=str))


def _option(args: list[str], name: str) -> str | None:
    """Value following ``--name`` in args, if present."""
    flag = f"--{name}"
    if flag in args:
        idx = args.index(flag)
        if idx + 1 < len(args):
            return args[idx + 1]
    return None


def _positionals(args: list[str]) -> list[str]:
    """Arguments that are neither flags nor flag values."""
    result: list[str] = []
    skip = False
    for arg in args:
        if skip:
            skip = False
            continue
        if arg.startswith("--"):
            skip = True
            continue
        result.append(arg)
    return result


async def cmd_test_config() -> None:
    """Test configuration loading."""
    settings = get_settings()

    output = CLIOutput(
        success=True,
        command="test-config",
        data={
            "environment": settings.environment,
            "database_url": settings.database.url,
            "rawg_base_url": settings.rawg.base_url,
            "rawg_requests_per_minute": settings.rawg.requests_per_minute,
            "api_key_configured": settings.rawg.has_api_key,
            "default_list_limit": settings.catalog.default_list_limit,
            "backfill_max_count": settings.catalog.backfill_max_count,
        },
    )
    print_json(output)


async def cmd_init_db() -> None:
    """Create the catalog schema."""
    from game_catalog.app import create_catalog

    async with create_catalog() as catalog:
        total = await catalog.store.count()

    print_json(CLIOutput(success=True, command="init-db", data={"games": total}))


async def cmd_search(
    query: str | None,
    genre: str | None = None,
    rating: str | None = None,
    mode: str | None = None,
) -> None:
    """Search the catalog, escalating to RAWG on a miss."""
    from game_catalog.app import create_catalog

    logger.info("Searching catalog", query=query, genre=genre, rating=rating, mode=mode)

    async with create_catalog() as catalog:
        result = await catalog.service.search_games(
            query=query, genre=genre, review_rating=rating, game_mode=mode
        )
        # Leaving the context drains the backfill
        output = CLIOutput(
            success=True,
            command="search",
            data={
                "outcome": result.outcome.value,
                "backfill_count": result.backfill_count,
                "provider_error": result.provider_error,
                "games": [game.model_dump(mode="json") for game in result.games],
            },
        )

    print_json(output)


async def cmd_list(limit: str | None) -> None:
    """List games in the catalog."""
    from game_catalog.app import create_catalog

    async with create_catalog() as catalog:
        games = await catalog.service.get_all_games(limit)

    print_json(
        CLIOutput(
            success=True,
            command="list",
            data=[game.model_dump(mode="json") for game in games],
        )
    )


async def cmd_get(game_id: int) -> None:
    """Show one game."""
    from game_catalog.app import create_catalog

    async with create_catalog() as catalog:
        game = await catalog.service.get_game(game_id)

    print_json(CLIOutput(success=True, command="get", data=game.model_dump(mode="json")))


async def cmd_feed(sort: str | None, limit: int | None) -> None:
    """Show the home feed."""
    from game_catalog.app import create_catalog

    async with create_catalog() as catalog:
        games = await catalog.service.get_feed(sort, limit)

    print_json(
        CLIOutput(
            success=True,
            command="feed",
            data=[game.model_dump(mode="json") for game in games],
        )
    )


async def cmd_delete(game_id: int) -> None:
    """Delete one game."""
    from game_catalog.app import create_catalog

    async with create_catalog() as catalog:
        await catalog.service.remove_game(game_id)

    print_json(CLIOutput(success=True, command="delete", data={"id": game_id}))


async def cmd_populate(count: int) -> None:
    """Replace the catalog with the currently popular RAWG games."""
    from game_catalog.app import create_catalog

    print("Game Catalog - Populate", file=sys.stderr)
    print(f"{'='*50}", file=sys.stderr)
    print(f"  Requested: {count}", file=sys.stderr)
    print(f"{'='*50}\n", file=sys.stderr)

    async with create_catalog() as catalog:
        report = await catalog.service.refresh_popular(count)

    if report.failures:
        print(f"Errors ({len(report.failures)}):", file=sys.stderr)
        for item in report.failures[:5]:
            print(f"    - {item.provider_id}/{item.title}: {(item.reason or '')[:50]}", file=sys.stderr)

    print_json(
        CLIOutput(
            success=report.failed == 0,
            command="populate",
            data={
                "batch_id": str(report.batch_id),
                "received": report.total_received,
                "inserted": report.inserted,
                "skipped": report.skipped,
                "failed": report.failed,
                "success_rate": report.success_rate,
            },
        )
    )


def print_usage() -> None:
    """Print CLI usage information."""
    usage = """
Game Catalog CLI
================

Usage: game-catalog <command> [arguments]

Commands:
  test-config                 Test configuration loading
  init-db                     Create the catalog schema
  search <query>              Search the catalog (escalates to RAWG on a miss)
  list [limit|all]            List games (default 200)
  get <id>                    Show one game
  feed [trending|random] [n]  Show the home feed (default 150)
  delete <id>                 Delete one game
  populate [count]            Replace the catalog with popular RAWG games

Options (search):
  --genre <a,b>               Comma-separated genres (any match)
  --rating <n>                Minimum review rating
  --mode <mode>               single-player, multiplayer or both

Examples:
  game-catalog search portal --genre Puzzle,Action
  game-catalog populate 150
"""
    print(usage)


def _require_int(args: list[str], what: str) -> int:
    if not args:
        print(f"Error: {what} required")
        sys.exit(1)
    return int(args[0])


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1]
    args = sys.argv[2:]
    positionals = _positionals(args)

    try:
        if command == "test-config":
            asyncio.run(cmd_test_config())

        elif command == "init-db":
            asyncio.run(cmd_init_db())

        elif command == "search":
            query = " ".join(positionals) or None
            asyncio.run(
                cmd_search(
                    query,
                    genre=_option(args, "genre"),
                    rating=_option(args, "rating"),
                    mode=_option(args, "mode"),
                )
            )

        elif command == "list":
            asyncio.run(cmd_list(positionals[0] if positionals else None))

        elif command == "get":
            asyncio.run(cmd_get(_require_int(positionals, "id")))

        elif command == "feed":
            sort = positionals[0] if positionals else None
            limit = int(positionals[1]) if len(positionals) > 1 else None
            asyncio.run(cmd_feed(sort, limit))

        elif command == "delete":
            asyncio.run(cmd_delete(_require_int(positionals, "id")))

        elif command == "populate":
            count = int(positionals[0]) if positionals else get_settings().catalog.default_feed_limit
            asyncio.run(cmd_populate(count))

        elif command in ("help", "--help", "-h"):
            print_usage()

        else:
            print(f"Unknown command: {command}")
            print_usage()
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception("CLI error", error=str(e))
        output = CLIOutput(
            success=False,
            command=command,
            error=str(e),
        )
        print_json(output)
        sys.exit(1)


if __name__ == "__main__":
    main()
