from .protocol import Command, InvalidCommandError, execute, parse_command
from .server import CommandServer

__all__ = ["Command", "CommandServer", "InvalidCommandError", "execute", "parse_command"]
