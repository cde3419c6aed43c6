import sys
import asyncio
import shlex
from typing import List

from teamlogos.logging.setup import setup_logging
from teamlogos.config.settings import settings

setup_logging()

import click
from loguru import logger
from rich import print
from rich.markup import escape
from rich.prompt import Prompt

from teamlogos.cache.local_store import LocalStore
from teamlogos.cache.logo_cache import LogoCache
from teamlogos.devtools.commands import DevTools, build_registry
from teamlogos.devtools.registry import CommandRegistry, UnknownCommandError
from teamlogos.providers.apisports_provider import ApiSportsProvider
from teamlogos.providers.thesportsdb_provider import TheSportsDbProvider
from teamlogos.resolution.logo_resolver import LogoResolver
from teamlogos.storage.logo_storage import LogoBucket, LogoStorageService
from teamlogos.storage.supabase_client import TeamRepository, initialize_supabase


async def run_command(registry: CommandRegistry, words: List[str]) -> None:
    name = words[0]
    try:
        result = await registry.dispatch(name, *words[1:])
    except UnknownCommandError:
        print(f"[red]Unknown command '{escape(name)}'. Type 'help' for the list.[/red]")
        return
    except click.ClickException as e:
        print(f"[red]{escape(e.format_message())}[/red] usage: {escape(registry.usage(name))}")
        return
    except Exception as e:
        logger.exception(f"Command {name} failed: {e}")
        return
    if result is not None and name != "help":
        logger.debug(f"{name} -> {result!r}")


async def shell(registry: CommandRegistry) -> None:
    print("🛠️  Dev tools loaded! Type [cyan]help[/cyan] for commands, [cyan]exit[/cyan] to quit.")
    while True:
        line = await asyncio.to_thread(Prompt.ask, "[bold]devTools[/bold]")
        try:
            words = shlex.split(line)
        except ValueError as e:
            print(f"[red]Could not parse input: {escape(str(e))}[/red]")
            continue
        if not words:
            continue
        if words[0] in ("exit", "quit"):
            return
        await run_command(registry, words)


async def main() -> None:
    """Builds the clients and command registry, then runs argv or the shell."""
    supabase_client = await initialize_supabase()
    if not supabase_client:
        logger.critical("Failed to initialize Supabase client. Exiting.")
        return

    repository = TeamRepository(supabase_client)
    cache = LogoCache(LocalStore(settings.cache_file), ttl_seconds=settings.cache_ttl_seconds)
    api_sports = ApiSportsProvider()
    thesportsdb = TheSportsDbProvider()
    # Primary (paid) provider first; it is skipped when no key is configured
    resolver = LogoResolver([api_sports, thesportsdb], cache, repository)
    storage = LogoStorageService(repository, LogoBucket(supabase_client))

    devtools = DevTools(repository, resolver, storage, cache, thesportsdb, api_sports)
    registry = build_registry(devtools)

    try:
        if len(sys.argv) > 1:
            await run_command(registry, sys.argv[1:])
        else:
            await shell(registry)
    finally:
        await resolver.drain()
        await api_sports.close()
        await thesportsdb.close()
        await storage.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, EOFError):
        logger.info("Execution interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
