import asyncio
import logging
import os

from command_server.server import CommandServer
from logdb import Engine

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger()


def load_settings(environ=os.environ) -> dict:
    """Read server settings from environment variables"""
    port = environ.get("LOGDB_PORT", "8080")
    try:
        port = int(port)
    except ValueError:
        raise ValueError(f"LOGDB_PORT must be an integer, got {port!r}")

    return {
        "path": environ.get("LOGDB_PATH", "example.db"),
        "host": environ.get("LOGDB_HOST", "127.0.0.1"),
        "port": port,
        "sync_writes": environ.get("LOGDB_SYNC_WRITES", "").lower() in ("1", "true", "yes"),
    }


async def main():
    settings = load_settings()
    engine = Engine.open(settings["path"], create=True, sync_writes=settings["sync_writes"])
    server = CommandServer(engine, host=settings["host"], port=settings["port"])
    logger.debug(f"Settings: {settings}")
    await server.start()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
