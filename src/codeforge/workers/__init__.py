"""Workers and task dispatch.

A worker executes one kind of task. The dispatcher maps a task's type to the
worker registered for it.
"""

from .base import CodebaseSnapshot, Context, Result, Task, Worker
from .builtin import WORKER_CLASSES, build_worker_registry
from .dispatcher import TASK_TYPE_TO_WORKER, TASK_TYPES, TaskDispatcher
from .fixing import ErrorFixingWorker
from .generation import CodeGenerationWorker
from .iterative import IterativeGenerationWorker
from .prompt import PromptWorker, extract_code, relevant_files
from .refactoring import RefactoringWorker
from .registry import WorkerRegistry
from .review import CodeReviewWorker
from .testing import TestingWorker, suggested_test_path

__all__ = [
    "CodebaseSnapshot",
    "Context",
    "Result",
    "Task",
    "Worker",
    "WorkerRegistry",
    "TaskDispatcher",
    "TASK_TYPE_TO_WORKER",
    "TASK_TYPES",
    "PromptWorker",
    "extract_code",
    "relevant_files",
    "CodeGenerationWorker",
    "CodeReviewWorker",
    "ErrorFixingWorker",
    "RefactoringWorker",
    "TestingWorker",
    "suggested_test_path",
    "IterativeGenerationWorker",
    "WORKER_CLASSES",
    "build_worker_registry",
]
