"""Start the signing notification workflow."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from temporalio.client import Client
from temporalio.exceptions import WorkflowAlreadyStartedError
from temporalio.service import RPCError

from ppc_contracts.core.config import settings
from worker.workflows import SigningNotificationWorkflow

logger = logging.getLogger(__name__)


def notification_workflow_id(
    document_id: str,
    signing_status: str,
    signed_roles: Iterable[str] = (),
) -> str:
    """One id per status and filled-slot set: ``awaiting_buyer``, ``awaiting_buyer-p``."""
    filled = "".join(sorted(role[0] for role in signed_roles))
    suffix = f"-{filled}" if filled else ""
    return f"signing-{document_id}-{signing_status}{suffix}"


async def start_signing_notifications(
    temporal: Optional[Client],
    owner_id: str,
    document_id: str,
    signing_status: str,
    signed_roles: Iterable[str] = (),
) -> Optional[str]:
    """Start the workflow and return its id, or None when it was not started.

    Notification is best effort: the signing operation that triggered it has
    already been committed.
    """
    if temporal is None:
        logger.warning("Temporal not connected; no notifications for contract %s", document_id)
        return None

    workflow_id = notification_workflow_id(document_id, signing_status, signed_roles)
    try:
        await temporal.start_workflow(
            SigningNotificationWorkflow.run,
            args=[owner_id, document_id],
            id=workflow_id,
            task_queue=settings.WORKER_TASK_QUEUE,
        )
    except WorkflowAlreadyStartedError:
        logger.info("Notification workflow %s already running", workflow_id)
        return None
    except RPCError as exc:
        logger.warning("Could not start notification workflow %s: %s", workflow_id, exc)
        return None

    logger.info("Started notification workflow %s", workflow_id)
    return workflow_id


__all__ = ["notification_workflow_id", "start_signing_notifications"]
