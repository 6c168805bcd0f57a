"""
Interactive console loop.

Reads standard input while the server runs, splits it into lines and
hands each non-blank line, tokenized on whitespace, to the command runner.
A failing command is reported on stderr and the loop keeps going.
"""
import asyncio
import inspect
import logging
import sys
import threading
from typing import AsyncIterator, Callable, List, Optional, TextIO

logger = logging.getLogger(__name__)

CLI_READY_MESSAGE = "💻 CLI is ready. Type commands below:"


class LineBuffer:
    """Reassembles lines from chunks that may split or join lines arbitrarily."""

    def __init__(self):
        self._pending = ""

    def feed(self, chunk: str) -> List[str]:
        """Add a chunk and return every line it completed."""
        self._pending += chunk
        if "\n" not in self._pending:
            return []
        lines = self._pending.split("\n")
        self._pending = lines.pop()
        return lines

    def flush(self) -> str:
        """Return and clear whatever is left after the last newline."""
        rest, self._pending = self._pending, ""
        return rest


def tokenize(line: str) -> List[str]:
    return line.split()


async def dispatch_line(line: str, runner: Callable, err: Optional[TextIO] = None) -> bool:
    """
    Run one command line.

    Returns False for blank input (nothing dispatched), True otherwise,
    whether or not the command succeeded.
    """
    args = tokenize(line)
    if not args:
        return False

    try:
        result = runner(args)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        print(f"CLI error: {e}", file=err or sys.stderr, flush=True)
        logger.debug(f"CLI command {args[0]!r} failed", exc_info=True)
    return True


async def run_cli_loop(chunks: AsyncIterator[str], runner: Callable, err: Optional[TextIO] = None) -> int:
    """
    Dispatch commands from a stream of text chunks until it ends.

    Commands run one at a time, in input order. A final line without a
    trailing newline is dispatched when the stream ends.

    Returns:
        Number of commands dispatched
    """
    buffer = LineBuffer()
    dispatched = 0
    async for chunk in chunks:
        for line in buffer.feed(chunk):
            if await dispatch_line(line, runner, err):
                dispatched += 1

    if await dispatch_line(buffer.flush(), runner, err):
        dispatched += 1
    return dispatched


async def read_stdin_chunks(stream: Optional[TextIO] = None) -> AsyncIterator[str]:
    """
    Yield text read from stdin (or the given stream) until EOF.

    Reading blocks, so it happens in a daemon thread that hands each chunk
    to the event loop; the thread never keeps the process alive.
    """
    if stream is None:
        stream = sys.stdin
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(encoding="utf-8", errors="replace")

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def pump():
        while True:
            try:
                chunk = stream.readline()
            except (OSError, ValueError) as e:
                logger.warning(f"Stopped reading console input: {e}")
                chunk = ""
            try:
                loop.call_soon_threadsafe(queue.put_nowait, chunk)
            except RuntimeError:
                # Event loop already closed
                return
            if not chunk:
                return

    threading.Thread(target=pump, name="cli-stdin", daemon=True).start()

    while True:
        chunk = await queue.get()
        if not chunk:
            return
        yield chunk


async def start_cli(runner: Callable, stream: Optional[TextIO] = None) -> int:
    """Announce the console and run the command loop on stdin until EOF."""
    print(CLI_READY_MESSAGE, flush=True)
    dispatched = await run_cli_loop(read_stdin_chunks(stream), runner)
    logger.info(f"Console input closed after {dispatched} command(s)")
    return dispatched
