import argparse
import functools
from typing import Protocol

from ringwatch.core.models.cluster import ClusterConfig
from ringwatch.core.models.message import Message


class CommandHandler(Protocol):
    def __call__(
        self,
        cluster: ClusterConfig,
        namespace: argparse.Namespace,
    ) -> Message:
        ...


class CommandDispatcher:
    """
    Routes a ringctl command to the handler registered for it.

    Handlers receive the discovered cluster and the parsed arguments and
    answer with a Message: "ok" when the command succeeded, "ko" otherwise.
    """
    def __init__(self) -> None:
        self._commands: dict[tuple[str, ...], CommandHandler] = {}

    def dispatch(
        self,
        *arguments: str,
        cluster: ClusterConfig,
        namespace: argparse.Namespace
    ) -> Message:
        command = self._commands.get(arguments)
        if command is None:
            raise RuntimeError(f"Unknown '{' '.join(arguments)}' Command")
        return command(cluster, namespace)

    def command(self, *arguments: str):
        def decorator(func: CommandHandler):

            @functools.wraps(func)
            def wrapper(
                cluster: ClusterConfig,
                namespace: argparse.Namespace,
            ) -> Message:
                return func(cluster, namespace)

            self._commands[arguments] = wrapper

            return wrapper

        return decorator
