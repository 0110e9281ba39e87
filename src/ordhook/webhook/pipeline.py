"""
Inscription pipeline and its background dispatcher.

A pipeline run downloads the referenced file, inscribes it and then
sends the inscription. Runs happen in background tasks after the
webhook has already answered, so failures are only reported through
logging.
"""

import asyncio
from typing import Optional, Set

from ordhook.core.logging import get_logger
from ordhook.core.settings import WalletSettings
from ordhook.exceptions import CommandError, DownloadError
from ordhook.webhook.executor import (
    CommandRunner,
    build_inscribe_command,
    build_send_command,
)
from ordhook.webhook.fetcher import FileFetcher
from ordhook.webhook.models import InscriptionRequest

logger = get_logger(__name__)


class InscriptionPipeline:
    """Download, inscribe, send; strictly in that order."""

    def __init__(self, fetcher: FileFetcher, runner: CommandRunner, wallet: WalletSettings):
        self.fetcher = fetcher
        self.runner = runner
        self.wallet = wallet

    async def run(self, request: InscriptionRequest) -> None:
        """
        Execute the pipeline for one request.

        Any failure aborts the remaining steps and is logged; nothing is
        raised to the caller.
        """
        try:
            file_path = await self.fetcher.fetch(request.file_url)

            inscribed = await self.runner.run(
                build_inscribe_command(self.wallet, file_path, request.fee_rate)
            )
            logger.info(f"Inscribed {file_path}: {inscribed.stdout.strip()}")

            # The inscription id is not passed on; send uses the wallet's own selection
            sent = await self.runner.run(
                build_send_command(self.wallet, request.fee_rate, request.address)
            )
            logger.info(f"Sent to {request.address}: {sent.stdout.strip()}")

        except DownloadError as e:
            logger.error(
                f"Download error: {e}",
                extra={"url": e.url, "status_code": e.status_code}
            )
        except CommandError as e:
            logger.error(
                f"Command error: {e}",
                extra={
                    "command_line": e.command_line,
                    "exit_code": e.exit_code,
                    "stderr": e.stderr,
                }
            )
        except Exception as e:
            logger.error(f"Inscription pipeline failed: {e}", exc_info=True)


class PipelineDispatcher:
    """Runs pipelines in background tasks and keeps track of them."""

    def __init__(self, pipeline: InscriptionPipeline):
        self.pipeline = pipeline
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, request: InscriptionRequest) -> asyncio.Task:
        """
        Schedule a pipeline run and return immediately.

        The task inherits the caller's context, so the request id set by
        the server stays attached to the pipeline's log lines.
        """
        task = asyncio.create_task(self._run(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, request: InscriptionRequest) -> None:
        logger.info(
            f"Pipeline started for {request.file_url} "
            f"(fee rate {request.fee_rate}, address {request.address})"
        )
        await self.pipeline.run(request)
        logger.info(f"Pipeline finished for {request.file_url}")

    def active_count(self) -> int:
        """Number of pipeline runs still in flight."""
        return sum(1 for task in self._tasks if not task.done())

    async def join(self) -> None:
        """Wait until every dispatched run has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, grace_seconds: Optional[float] = None) -> None:
        """Give in-flight runs ``grace_seconds`` to finish, then cancel them."""
        if not self._tasks:
            return

        logger.info(f"Waiting for {len(self._tasks)} pipeline(s) to finish")
        pending = list(self._tasks)
        _, still_running = await asyncio.wait(pending, timeout=grace_seconds)

        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(f"Cancelled {len(still_running)} unfinished pipeline(s)")
            await asyncio.gather(*still_running, return_exceptions=True)
