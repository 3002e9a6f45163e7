from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from domain.models import WorkflowDefinition, WorkflowLayout


class WorkflowRepository(Protocol):
    def load_all(self, directory: Path) -> Sequence[WorkflowDefinition]: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, WorkflowDefinition]]: ...

    def load_by_path(self, path: Path) -> WorkflowDefinition: ...

    def save(self, definition: WorkflowDefinition, path: Path) -> None: ...


class LayoutRepository(Protocol):
    def save(self, layout: WorkflowLayout, path: Path) -> None: ...

    def load_payload(self, path: Path) -> dict[str, Any]: ...
