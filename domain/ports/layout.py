from __future__ import annotations

from typing import Protocol

from domain.models import WorkflowDefinition, WorkflowLayout


class LayoutEngine(Protocol):
    def build_layout(self, definition: WorkflowDefinition) -> WorkflowLayout:
        ...
