"""Temporal Worker entry point.

This worker polls the contract-notifications queue for workflow and activity tasks.
"""
import asyncio
import logging
import signal
from concurrent.futures import ThreadPoolExecutor

from temporalio.client import Client
from temporalio.worker import Worker

from ppc_contracts.core.logging import setup_logging
from worker.activities import archive_executed_contract, prepare_notifications, send_email
from worker.config import WorkerSettings
from worker.workflows import SigningNotificationWorkflow

logger = logging.getLogger("worker")


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    """Install signal handlers for graceful shutdown."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:  # pragma: no cover - Windows
            signal.signal(sig, lambda *_: stop_event.set())


async def run_worker() -> None:
    """Run the Temporal worker."""
    setup_logging()
    settings = WorkerSettings()

    logger.info("Starting worker: %r", settings)
    if not settings.email_enabled:
        logger.warning("RESEND_API_KEY is not set; email activities will fail")

    client = await Client.connect(
        settings.TEMPORAL_ADDRESS,
        namespace=settings.TEMPORAL_NAMESPACE,
    )

    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)

    # Activities are sync (DB, MinIO, httpx) and run on the thread pool
    with ThreadPoolExecutor(max_workers=settings.MAX_ACTIVITY_THREADS) as activity_executor:
        worker = Worker(
            client,
            task_queue=settings.WORKER_TASK_QUEUE,
            workflows=[SigningNotificationWorkflow],
            activities=[prepare_notifications, send_email, archive_executed_contract],
            activity_executor=activity_executor,
        )
        async with worker:
            logger.info("Worker polling %s", settings.WORKER_TASK_QUEUE)
            await stop_event.wait()
            logger.info("Shutdown signal received, draining worker")

    logger.info("Worker stopped")


def main() -> None:
    """Main entry point."""
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
