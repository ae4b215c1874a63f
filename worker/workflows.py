"""Temporal Workflows for contract signing notifications.

SigningNotificationWorkflow runs after a contract is opened for signing and
after every captured signature:
prepare_notifications -> send_email (per message) -> archive_executed_contract
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

with workflow.unsafe.imports_passed_through():
    from worker.activities import archive_executed_contract, prepare_notifications, send_email

FULLY_SIGNED = "fully_signed"


@workflow.defn
class SigningNotificationWorkflow:
    """Email the signers about the contract's current state.

    Parties with an empty signature slot get their signing link. Once both
    slots are filled everyone is told the contract is executed and the signed
    document is archived. A failed email does not stop the others.
    """

    @workflow.run
    async def run(self, owner_id: str, document_id: str) -> dict:
        """Execute the notification workflow.

        Args:
            owner_id: Owner namespace of the contract.
            document_id: UUID of the contract document.

        Returns:
            Dict with status, document_id, email counts and archive key.
        """
        workflow.logger.info(f"Starting notification workflow for contract {document_id}")

        # The record must exist; a missing one will not appear on retry
        prepared = await workflow.execute_activity(
            prepare_notifications,
            args=[owner_id, document_id],
            start_to_close_timeout=timedelta(minutes=1),
            retry_policy=RetryPolicy(
                maximum_attempts=3,
                non_retryable_error_types=["NotFound", "InvalidState"],
            ),
        )

        sent = 0
        failed = 0
        for message in prepared["messages"]:
            try:
                await workflow.execute_activity(
                    send_email,
                    message,
                    start_to_close_timeout=timedelta(minutes=2),
                    retry_policy=RetryPolicy(
                        maximum_attempts=3,
                        initial_interval=timedelta(seconds=2),
                        backoff_coefficient=2.0,
                        maximum_interval=timedelta(seconds=30),
                        non_retryable_error_types=["EmailSendError", "DomainVerificationError"],
                    ),
                )
                sent += 1
            except ActivityError as e:
                failed += 1
                workflow.logger.warning(f"Email to {message.get('to')} failed: {e.cause or e}")

        archive_key = None
        if prepared["status"] == FULLY_SIGNED:
            archive_key = await workflow.execute_activity(
                archive_executed_contract,
                args=[owner_id, document_id],
                start_to_close_timeout=timedelta(minutes=1),
                retry_policy=RetryPolicy(maximum_attempts=3),
            )

        workflow.logger.info(
            f"Notification workflow completed for contract {document_id}: "
            f"{sent} sent, {failed} failed"
        )

        return {
            "status": prepared["status"],
            "document_id": document_id,
            "emails_sent": sent,
            "emails_failed": failed,
            "archive_key": archive_key,
        }


__all__ = ["SigningNotificationWorkflow"]
