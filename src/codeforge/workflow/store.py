"""Workflow definition store: register, look up and persist workflows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from codeforge.errors import InvalidDefinitionError, WorkflowNotFoundError
from codeforge.registry import Registry
from codeforge.utils.validation import validate_identifier

from .builtin import builtin_workflows
from .loader import DEFINITION_SUFFIXES, dump_workflow_file, load_workflow_file
from .models import Workflow

logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """Outcome of loading a directory of workflow files."""

    directory: Path
    loaded: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)


class WorkflowStore(Registry[Workflow]):
    """Registry of workflow definitions keyed by workflow id.

    Registering an existing id replaces the earlier definition.
    """

    def __init__(self):
        super().__init__("workflow", not_found=WorkflowNotFoundError)

    def register(self, workflow: Workflow) -> None:  # type: ignore[override]
        """Validate and register a workflow.

        Raises:
            InvalidDefinitionError: If the workflow breaks a definition invariant
        """
        errors = workflow.validate()
        if errors:
            raise InvalidDefinitionError(
                f"Invalid workflow definition: {'; '.join(errors)}", errors=errors
            )
        super().register(workflow.id, workflow)

    def load_builtins(self) -> int:
        """Register the built-in workflows. Returns how many were registered."""
        workflows = builtin_workflows()
        for workflow in workflows:
            self.register(workflow)
        return len(workflows)

    def load_directory(self, directory: str | Path) -> LoadReport:
        """Register every workflow file found in ``directory``.

        A malformed file is logged and skipped. A missing directory is
        created empty.
        """
        directory = Path(directory)
        report = LoadReport(directory=directory)

        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            return report

        for path in sorted(directory.iterdir()):
            if path.suffix not in DEFINITION_SUFFIXES or not path.is_file():
                continue
            try:
                workflow = load_workflow_file(path)
                self.register(workflow)
            except (InvalidDefinitionError, OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping workflow file %s: %s", path, e)
                report.skipped[str(path)] = str(e)
                continue
            report.loaded.append(workflow.id)

        logger.info(
            "Loaded %d workflow(s) from %s (%d skipped)",
            len(report.loaded),
            directory,
            len(report.skipped),
        )
        return report

    def save(self, workflow: Workflow, directory: str | Path) -> Path:
        """Persist a workflow as ``<id>.json`` in ``directory``.

        Raises:
            InvalidDefinitionError: If the id is not a safe file name or the
                workflow cannot be serialized
        """
        validate_identifier(workflow.id, name="workflow id")
        path = dump_workflow_file(workflow, Path(directory) / f"{workflow.id}.json")
        logger.debug("Saved workflow %s to %s", workflow.id, path)
        return path
