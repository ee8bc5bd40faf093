"""Construction of the default worker set."""

from __future__ import annotations

import logging

from codeforge.config.settings import Settings
from codeforge.providers.router import ModelRouter
from codeforge.validation.code_validator import CodeValidator

from .fixing import ErrorFixingWorker
from .generation import CodeGenerationWorker
from .iterative import IterativeGenerationWorker
from .refactoring import RefactoringWorker
from .registry import WorkerRegistry
from .review import CodeReviewWorker
from .testing import TestingWorker

logger = logging.getLogger(__name__)

WORKER_CLASSES = {
    "codeGeneration": CodeGenerationWorker,
    "codeReview": CodeReviewWorker,
    "errorFixing": ErrorFixingWorker,
    "refactoring": RefactoringWorker,
    "testing": TestingWorker,
}


def build_worker_registry(
    settings: Settings,
    router: ModelRouter,
    validator: CodeValidator | None = None,
) -> WorkerRegistry:
    """Register the enabled built-in workers.

    The iterative generator has no enable flag and is always registered.
    """
    validator = validator or CodeValidator()
    registry = WorkerRegistry()

    for key in settings.enabled_workers():
        registry.register(WORKER_CLASSES[key](router, validator), name=key)

    registry.register(
        IterativeGenerationWorker(router, validator, max_iterations=settings.max_iterations)
    )
    logger.info("Registered workers: %s", ", ".join(registry))
    return registry
