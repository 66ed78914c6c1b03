"""Interactive one-time code prompt on the controlling terminal.

The MCP stdio transport owns this process's stdin and stdout, so the prompt
must never touch them. It opens the terminal device separately, writes the
prompt there, and reads the reply through the event loop so the timeout can
cancel the wait cleanly.
"""

import asyncio
import logging
import os
from collections.abc import Callable

from .consts import MFA_PROMPT_TIMEOUT_SECONDS, TTY_DEVICE
from .exceptions import MfaChannelUnavailable, MfaError, MfaTimeout

logger = logging.getLogger("nps-mcp.mfa")

PROMPT_TEXT = "NPS MFA code: "

REMEDIATION = [
    "Set NPS_MFA_PROMPT=false and NPS_MFA_CODE to use a static code",
    "Or set NPS_TOKEN to a bearer token obtained from a browser login",
]


class TtyChannel:
    """Line-oriented control channel over terminal file descriptors.

    Owns its descriptors; ``close`` releases them. Only MfaPrompt uses this.
    """

    def __init__(self, read_fd: int, write_fd: int | None = None):
        self.read_fd = read_fd
        self.write_fd = read_fd if write_fd is None else write_fd
        self.closed = False

    def write(self, text: str) -> None:
        os.write(self.write_fd, text.encode())

    async def read_line(self) -> str:
        """Wait for one line of input without blocking the event loop.

        Raises:
            EOFError: If the terminal closes before a full line arrives.
            OSError: If the descriptor cannot be read.
            NotImplementedError: If the event loop cannot watch file descriptors.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        buffer = bytearray()

        def on_readable() -> None:
            if future.done():
                return
            try:
                chunk = os.read(self.read_fd, 1024)
            except OSError as e:
                future.set_exception(e)
                return
            if not chunk:
                future.set_exception(EOFError("terminal closed"))
                return
            buffer.extend(chunk)
            if b"\n" in buffer:
                line = bytes(buffer).split(b"\n", 1)[0]
                future.set_result(line.decode(errors="replace").strip())

        loop.add_reader(self.read_fd, on_readable)
        try:
            return await future
        finally:
            loop.remove_reader(self.read_fd)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for fd in {self.read_fd, self.write_fd}:
            try:
                os.close(fd)
            except OSError as e:
                logger.debug(f"Closing terminal descriptor {fd} failed: {e}")


def open_tty(path: str = TTY_DEVICE) -> TtyChannel:
    """Open the controlling terminal for reading and writing.

    Raises:
        OSError: If no terminal is attached to the process.
    """
    fd = os.open(path, os.O_RDWR | getattr(os, "O_NOCTTY", 0))
    return TtyChannel(fd)


class MfaPrompt:
    """Acquires a one-time code from a human at the terminal.

    Holds the control channel capability only; it never sees the protocol
    transport. One prompt may be outstanding at a time.
    """

    def __init__(
        self,
        open_channel: Callable[[], TtyChannel] = open_tty,
        timeout_seconds: float = MFA_PROMPT_TIMEOUT_SECONDS,
    ):
        """Initialize MfaPrompt.

        Args:
            open_channel: Factory for the terminal channel; raises OSError when
                no terminal is available.
            timeout_seconds: Default time to wait for the code.
        """
        self._open_channel = open_channel
        self.timeout_seconds = timeout_seconds
        self._lock = asyncio.Lock()

    def _open(self) -> TtyChannel:
        try:
            return self._open_channel()
        except OSError as e:
            raise MfaChannelUnavailable(
                "No interactive terminal available for the MFA prompt",
                errors=[str(e)],
                suggestions=REMEDIATION,
            ) from e

    def check_available(self) -> None:
        """Fail fast if the terminal cannot be opened.

        Raises:
            MfaChannelUnavailable: If no terminal is attached.
        """
        self._open().close()

    async def prompt_for_code(self, timeout_seconds: float | None = None) -> str:
        """Prompt on the terminal and return the code entered.

        Args:
            timeout_seconds: Overrides the default wait.

        Returns:
            The code, stripped of surrounding whitespace.

        Raises:
            MfaChannelUnavailable: If the terminal cannot be opened or read.
            MfaTimeout: If no line arrives in time.
            MfaError: If an empty line is entered.
        """
        timeout = timeout_seconds or self.timeout_seconds
        async with self._lock:
            channel = self._open()
            try:
                channel.write(PROMPT_TEXT)
                code = await asyncio.wait_for(channel.read_line(), timeout)
            except TimeoutError as e:
                raise MfaTimeout(
                    f"No MFA code entered within {timeout:g} seconds",
                    suggestions=REMEDIATION,
                    context={"timeout_seconds": timeout},
                ) from e
            except (OSError, EOFError, NotImplementedError) as e:
                raise MfaChannelUnavailable(
                    "Could not read the MFA code from the terminal",
                    errors=[str(e) or type(e).__name__],
                    suggestions=REMEDIATION,
                ) from e
            finally:
                channel.close()

        if not code:
            raise MfaError("Empty MFA code entered", suggestions=REMEDIATION)
        logger.info("MFA code received from terminal")
        return code
