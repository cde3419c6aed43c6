import inspect
from typing import Any, List

import click


class UnknownCommandError(KeyError):
    """Raised when dispatching a name that was never registered."""

    pass


class CommandRegistry(click.Group):
    """Named admin commands, built once at startup and handed to a shell.

    Commands are ordinary click commands; their callbacks may return a
    coroutine, which dispatch awaits.
    """

    def __init__(self, name: str = "devTools", **kwargs: Any):
        super().__init__(name=name, **kwargs)

    def add_command(self, cmd: click.Command, name: str = None) -> None:
        name = name or cmd.name
        if name in self.commands:
            raise ValueError(f"Command already registered: {name}")
        super().add_command(cmd, name)

    def get(self, name: str) -> click.Command:
        try:
            return self.commands[name]
        except KeyError:
            raise UnknownCommandError(name) from None

    def names(self) -> List[str]:
        return list(self.commands)

    def __contains__(self, name: str) -> bool:
        return name in self.commands

    def usage(self, name: str) -> str:
        command = self.get(name)
        ctx = click.Context(command, info_name=name)
        return " ".join([name, *command.collect_usage_pieces(ctx)])

    async def dispatch(self, name: str, *args: Any) -> Any:
        """Parses the shell words with click and runs the command.

        Bad arguments raise click.UsageError.
        """
        self.get(name)
        result = self.main(
            [name, *(str(a) for a in args)],
            prog_name=self.name,
            standalone_mode=False,
        )
        if inspect.isawaitable(result):
            result = await result
        return result
