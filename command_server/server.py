import asyncio
import logging
import time

from logdb import Engine
from .protocol import INVALID_COMMAND, InvalidCommandError, execute, parse_command

logger = logging.getLogger(__name__)

# Largest accepted request line (StreamReader buffer limit)
DEFAULT_LINE_LIMIT = 16 * 1024 * 1024


class CommandServer:
    def __init__(
        self,
        engine: Engine,
        host: str = '127.0.0.1',
        port: int = 8080,
        line_limit: int = DEFAULT_LINE_LIMIT,
    ):
        if not 0 <= port <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {port}")
        if line_limit <= 0:
            raise ValueError(f"line_limit must be positive, got {line_limit}")

        self.engine = engine
        self.host = host
        self.port = port
        self.line_limit = line_limit
        # The engine does no locking of its own, every call goes through here
        self._engine_lock = asyncio.Lock()

    async def handle_line(self, line: str) -> str | None:
        """Parse and run one request line, returning the reply (None for blank lines)"""
        try:
            command = parse_command(line)
        except InvalidCommandError as e:
            logger.debug(f"Rejected line {line!r}: {e}")
            return INVALID_COMMAND

        if command is None:
            return None

        loop = asyncio.get_running_loop()
        async with self._engine_lock:
            return await loop.run_in_executor(None, execute, self.engine, command)

    @staticmethod
    async def _discard_line(reader: asyncio.StreamReader, consumed: int):
        """Drop the remainder of an over-long line, up to and including its newline"""
        while True:
            try:
                # Bytes already scanned without finding the separator
                await reader.readexactly(consumed)
                await reader.readuntil(b"\n")
                return
            except asyncio.LimitOverrunError as e:
                consumed = e.consumed
            except asyncio.IncompleteReadError:
                return

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Serve one connection until the client disconnects"""
        peer = writer.get_extra_info('peername')
        logger.debug(f"Connection from {peer}")

        try:
            while True:
                try:
                    raw = await reader.readuntil(b"\n")
                except asyncio.IncompleteReadError as e:
                    # EOF, possibly after an unterminated last line
                    raw = e.partial
                except asyncio.LimitOverrunError as e:
                    logger.debug(f"Discarding over-long line from {peer}")
                    await self._discard_line(reader, e.consumed)
                    writer.write(b"Error: line too long\n")
                    await writer.drain()
                    continue

                if not raw:
                    break

                start_time = time.perf_counter()
                line = raw.decode('utf-8', errors='replace')

                try:
                    reply = await self.handle_line(line)
                except Exception as e:
                    logger.error(f"Handler error: {e}")
                    reply = "Error: internal error"

                if reply is None:
                    continue

                writer.write(reply.encode('utf-8') + b"\n")
                await writer.drain()

                elapsed_ms = (time.perf_counter() - start_time) * 1000
                logger.debug(f"<-- {len(reply)} chars - {elapsed_ms:.2f}ms")

        except ConnectionResetError:
            pass
        except Exception as e:
            logger.error(f"Connection error from {peer}: {e}")
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass
            logger.debug(f"Connection from {peer} closed")

    async def start(self):
        """Start the command server and serve until cancelled"""
        server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=self.line_limit,
        )

        addr = server.sockets[0].getsockname()
        logger.info(f'Storage command server listening on {addr[0]}:{addr[1]}')

        try:
            async with server:
                await server.serve_forever()
        except asyncio.CancelledError:
            logger.info("Server shutdown requested")
        finally:
            await self.shutdown(server)

    async def shutdown(self, server):
        """Gracefully shutdown the server and close the engine"""
        logger.info("Shutting down server...")
        server.close()
        await server.wait_closed()
        async with self._engine_lock:
            self.engine.close()
        logger.info("Server shutdown complete")
