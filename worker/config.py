"""Settings for the notification worker process.

Database, MinIO and Resend settings come from ``ppc_contracts.core.config``,
shared with the API. Only the worker's own knobs are read here.
"""
import os

from ppc_contracts.core.config import settings as app_settings


class WorkerSettings:
    """Temporal connection and activity pool for the notification worker."""

    def __init__(self):
        self.TEMPORAL_ADDRESS = os.getenv("TEMPORAL_ADDRESS", app_settings.TEMPORAL_ADDRESS)
        self.TEMPORAL_NAMESPACE = os.getenv("TEMPORAL_NAMESPACE", app_settings.TEMPORAL_NAMESPACE)
        # Must match the queue the API starts workflows on
        self.WORKER_TASK_QUEUE = os.getenv("WORKER_TASK_QUEUE", app_settings.WORKER_TASK_QUEUE)
        # Activities block on DB, MinIO and Resend
        self.MAX_ACTIVITY_THREADS = int(os.getenv("WORKER_MAX_ACTIVITY_THREADS", "4"))

    @property
    def email_enabled(self) -> bool:
        return bool(app_settings.RESEND_API_KEY)

    def __repr__(self):
        return (
            f"WorkerSettings(temporal={self.TEMPORAL_ADDRESS}/{self.TEMPORAL_NAMESPACE}, "
            f"queue={self.WORKER_TASK_QUEUE}, threads={self.MAX_ACTIVITY_THREADS}, "
            f"email={'enabled' if self.email_enabled else 'disabled'})"
        )
