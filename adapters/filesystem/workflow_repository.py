from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from adapters.filesystem.workflow_utils import iter_workflow_paths, strip_json_comments
from domain.models import WorkflowDefinition
from domain.ports.repositories import WorkflowRepository

logger = logging.getLogger(__name__)


class FileSystemWorkflowRepository(WorkflowRepository):
    def load_all(self, directory: Path) -> List[WorkflowDefinition]:
        return [definition for _, definition in self.load_all_with_paths(directory)]

    def load_all_with_paths(self, directory: Path) -> List[tuple[Path, WorkflowDefinition]]:
        return [(path, self.load_by_path(path)) for path in sorted(iter_workflow_paths(directory))]

    def load_by_path(self, path: Path) -> WorkflowDefinition:
        logger.debug("Loading workflow from %s", path)
        content = json.loads(strip_json_comments(path.read_text(encoding="utf-8")))
        return WorkflowDefinition.model_validate(content)

    def save(self, definition: WorkflowDefinition, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = definition.to_payload()
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
