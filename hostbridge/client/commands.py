"""
hostbridge/client/commands.py

Host-application command hook.

The host application forwards every command it receives as
(command, args). Every command is first passed to the previously
installed handler, if any, so this dispatcher can be chained in front
of an existing one. Only `ChangeHost <value>` is acted on here.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import structlog

from hostbridge.client.configuration import ClientConfig

logger = structlog.get_logger(__name__)

CHANGE_HOST = "ChangeHost"

CommandHandler = Callable[[str, Sequence[str]], object]


class HostCommandDispatcher:
    def __init__(self, config: ClientConfig, previous: Optional[CommandHandler] = None) -> None:
        self.config = config
        self.previous = previous

    def dispatch(self, command: str, args: Sequence[str]) -> bool:
        """
        Returns True when the command was handled by this dispatcher.

        Raises:
            ValueError: ChangeHost was sent without a value.
        """
        if self.previous is not None:
            self.previous(command, args)

        if command != CHANGE_HOST:
            logger.debug("command_ignored", command=command)
            return False

        if not args:
            raise ValueError("ChangeHost requires a host value")

        self.config.set_host(args[0])
        return True

    __call__ = dispatch
