from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from adapters.layout.matrix import MatrixLayoutEngine
from app.config import AppSettings, LayoutSettings, PathSettings
from domain.models import WorkflowDefinition
from tests.helpers.workflow_fixtures import linear_steps, reconverging_fork_steps


def _clear_wfvis_env() -> None:
    for key in list(os.environ):
        if key.startswith("WFVIS_"):
            os.environ.pop(key, None)


_clear_wfvis_env()


@pytest.fixture(autouse=True)
def clear_wfvis_env() -> Generator[None, None, None]:
    _clear_wfvis_env()
    yield
    _clear_wfvis_env()


@pytest.fixture
def layout_engine() -> MatrixLayoutEngine:
    return MatrixLayoutEngine()


@pytest.fixture
def linear_definition() -> WorkflowDefinition:
    return WorkflowDefinition(workflow_id="W", steps=linear_steps(4))


@pytest.fixture
def fork_definition() -> WorkflowDefinition:
    return WorkflowDefinition(workflow_id="W", steps=reconverging_fork_steps())


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        layout=LayoutSettings(),
        paths=PathSettings(
            workflows_dir=tmp_path / "workflows",
            layouts_dir=tmp_path / "layouts",
        ),
        log_level="WARNING",
    )


@pytest.fixture
def app_settings_factory(app_settings: AppSettings) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return app_settings.model_copy(update=overrides)

    return _factory
