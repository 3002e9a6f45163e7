from __future__ import annotations

from adapters.filesystem.layout_repository import FileSystemLayoutRepository
from adapters.filesystem.workflow_repository import FileSystemWorkflowRepository
from adapters.layout.matrix import LayoutConfig, MatrixLayoutEngine
from app.config import AppSettings
from domain.ports.layout import LayoutEngine
from domain.ports.repositories import LayoutRepository, WorkflowRepository


def build_layout_engine(settings: AppSettings) -> LayoutEngine:
    layout = settings.layout
    return MatrixLayoutEngine(
        LayoutConfig(
            start_node_suffix=layout.start_node_suffix,
            add_branch_affordance=layout.add_branch_affordance,
        )
    )


def build_workflow_repository(settings: AppSettings) -> WorkflowRepository:
    return FileSystemWorkflowRepository()


def build_layout_repository(settings: AppSettings) -> LayoutRepository:
    return FileSystemLayoutRepository()
