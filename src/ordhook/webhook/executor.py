"""
Command execution for the ord wallet.

Commands are run as argument vectors through
``asyncio.create_subprocess_exec``; nothing is passed through a shell,
so request parameters are never interpreted as shell syntax.
"""

import asyncio
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ordhook.core.logging import get_logger
from ordhook.core.settings import WalletSettings
from ordhook.exceptions import CommandError

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Result of one finished command."""
    command_line: str
    exit_code: int
    stdout: str
    stderr: str


def format_fee_rate(fee_rate: float) -> str:
    """Render a fee rate the way it was sent (10 stays "10", not "10.0")."""
    if float(fee_rate).is_integer():
        return str(int(fee_rate))
    return repr(float(fee_rate))


def _wallet_prefix(wallet: WalletSettings) -> List[str]:
    return [os.path.expanduser(wallet.ord_binary), "--wallet", wallet.wallet_name, "wallet"]


def build_inscribe_command(
    wallet: WalletSettings,
    file_path: Union[str, Path],
    fee_rate: float
) -> List[str]:
    """Build ``ord --wallet <name> wallet inscribe --fee-rate <fee> -- <file>``."""
    return _wallet_prefix(wallet) + [
        "inscribe", "--fee-rate", format_fee_rate(fee_rate), "--", str(file_path)
    ]


def build_send_command(wallet: WalletSettings, fee_rate: float, address: str) -> List[str]:
    """Build ``ord --wallet <name> wallet send --fee-rate <fee> -- <address>``."""
    return _wallet_prefix(wallet) + [
        "send", "--fee-rate", format_fee_rate(fee_rate), "--", address
    ]


class CommandRunner:
    """Runs external commands and fails on non-zero exit."""

    def __init__(self, timeout_seconds: Optional[float] = None):
        """
        Initialize the runner.

        Args:
            timeout_seconds: Kill commands running longer than this;
                None waits indefinitely
        """
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: WalletSettings) -> "CommandRunner":
        return cls(timeout_seconds=settings.command_timeout_seconds)

    async def run(self, argv: Sequence[str]) -> CommandResult:
        """
        Execute a command and capture its output.

        Args:
            argv: Program and arguments

        Returns:
            CommandResult of the successful run

        Raises:
            CommandError: the command could not be spawned, timed out,
                or exited with a non-zero status
        """
        command_line = shlex.join(argv)
        logger.info(f"Running command: {command_line}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise CommandError(
                f"Could not start command: {e}",
                command_line=command_line
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise CommandError(
                f"Command timed out after {self.timeout_seconds}s",
                command_line=command_line
            )
        except asyncio.CancelledError:
            process.kill()
            raise

        result = CommandResult(
            command_line=command_line,
            exit_code=process.returncode,
            stdout=stdout.decode('utf-8', errors='replace'),
            stderr=stderr.decode('utf-8', errors='replace')
        )

        logger.debug(f"stdout: {result.stdout}")
        logger.debug(f"stderr: {result.stderr}")

        if result.exit_code != 0:
            raise CommandError(
                f"Command exited with status {result.exit_code}",
                command_line=command_line,
                exit_code=result.exit_code,
                stdout=result.stdout,
                stderr=result.stderr
            )

        return result
