"""Worker registry: maps a worker name to the Worker instance serving it."""

from __future__ import annotations

import logging

from codeforge.errors import WorkerNotFoundError
from codeforge.registry import Registry

from .base import Worker

logger = logging.getLogger(__name__)


class WorkerRegistry(Registry[Worker]):
    """Registry of workers keyed by name.

    Populated once at startup; read-only while runs are dispatching.
    """

    def __init__(self):
        super().__init__("worker", not_found=WorkerNotFoundError)

    def register(self, worker: Worker, name: str | None = None) -> None:  # type: ignore[override]
        """Register a worker under ``name`` (defaults to ``worker.name``)."""
        super().register(name or worker.name, worker)
