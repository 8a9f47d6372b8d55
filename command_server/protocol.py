from dataclasses import dataclass

from logdb import Engine, KeyNotFoundError, StoreError

OK = "OK"
KEY_NOT_FOUND = "Key not found"
INVALID_COMMAND = "Invalid command"

# verb -> number of arguments after the verb
ARITY = {
    "get": 1,
    "put": 2,
    "delete": 1,
}


class InvalidCommandError(ValueError):
    pass


@dataclass
class Command:
    verb: str
    args: list[str]

    @property
    def key(self) -> str:
        return self.args[0]


def parse_command(line: str) -> Command | None:
    """
    Parse one protocol line.

    Returns None for a blank line. Raises InvalidCommandError for an
    unknown verb or the wrong number of arguments.
    """
    tokens = line.split()
    if not tokens:
        return None

    verb = tokens[0].lower()
    arity = ARITY.get(verb)
    if arity is None:
        raise InvalidCommandError(f"Unknown command: {tokens[0]}")

    args = tokens[1:]
    if len(args) != arity:
        raise InvalidCommandError(
            f"'{verb}' expects {arity} argument(s), got {len(args)}"
        )

    return Command(verb=verb, args=args)


def execute(engine: Engine, command: Command) -> str:
    """Run a parsed command against the engine and render the reply line."""
    try:
        if command.verb == "get":
            return engine.get(command.key)
        if command.verb == "put":
            engine.put(command.key, command.args[1])
            return OK
        if command.verb == "delete":
            engine.delete(command.key)
            return OK
    except KeyNotFoundError:
        return KEY_NOT_FOUND
    except StoreError as e:
        return f"Error: {e}"

    raise InvalidCommandError(f"Unknown command: {command.verb}")
