from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator

TileKind = Literal["node", "fork", "connector"]
TileContainer = Literal["box", "diamond", "standard"]

TILE_KIND_NODE: TileKind = "node"
TILE_KIND_FORK: TileKind = "fork"
TILE_KIND_CONNECTOR: TileKind = "connector"
TILE_KINDS: Tuple[str, ...] = (TILE_KIND_NODE, TILE_KIND_FORK, TILE_KIND_CONNECTOR)

CONTAINER_BOX: TileContainer = "box"
CONTAINER_DIAMOND: TileContainer = "diamond"
CONTAINER_STANDARD: TileContainer = "standard"
TILE_CONTAINERS: Tuple[str, ...] = (CONTAINER_BOX, CONTAINER_DIAMOND, CONTAINER_STANDARD)

CONNECTOR_EMPTY = "empty"
CONNECTOR_LINE_HORIZ = "lineHoriz"
CONNECTOR_LINE_VERT = "lineVert"
CONNECTOR_ARROW_RIGHT = "arrowRight"
CONNECTOR_ARROW_UP = "arrowUp"
CONNECTOR_DOWN_RIGHT = "downRight"
CONNECTOR_RIGHT_UP = "rightUp"
CONNECTOR_RIGHT_UP_ARROW = "rightUpArrow"
CONNECTOR_DOWN_RIGHT_DASH = "downRightDash"

STEP_TYPE_STEP = "step"
STEP_TYPE_FORK = "fork"
STEP_TYPE_START = "start"
START_NODE_SUFFIX = "-auth"


class NextStepRef(BaseModel):
    step_id: str = Field(..., min_length=1, validation_alias=AliasChoices("step_id", "id"))
    primary: bool = Field(default=False, validation_alias=AliasChoices("primary", "isPrimary"))


class WorkflowStep(BaseModel):
    step_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("step_id", "workflowStepUid")
    )
    order: int = Field(..., ge=1, validation_alias=AliasChoices("order", "workflowStepOrder"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "workflowStepName"))
    step_type: str = Field(
        default=STEP_TYPE_STEP, validation_alias=AliasChoices("step_type", "workflowStepType")
    )
    next_steps: List[NextStepRef] = Field(
        default_factory=list, validation_alias=AliasChoices("next_steps", "nextStepRefs")
    )
    is_disabled: bool = Field(
        default=False, validation_alias=AliasChoices("is_disabled", "isDisabled")
    )
    warning_message: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("warning_message", "warningMessage")
    )

    @field_validator("step_type", mode="before")
    @classmethod
    def normalize_step_type(cls, value: object) -> str:
        normalized = str(value or "").strip().lower()
        return normalized or STEP_TYPE_STEP

    @field_validator("warning_message", mode="before")
    @classmethod
    def blank_warning_to_none(cls, value: object) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def is_fork(self) -> bool:
        return self.step_type == STEP_TYPE_FORK


class WorkflowDefinition(BaseModel):
    workflow_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("workflow_id", "workflowUid")
    )
    steps: List[WorkflowStep] = Field(
        default_factory=list, validation_alias=AliasChoices("steps", "workflowSteps")
    )

    def step_ids(self) -> List[str]:
        return [step.step_id for step in self.steps]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


@dataclass(frozen=True, order=True)
class MatrixCoord:
    col: int
    row: int


@dataclass(frozen=True)
class CoordPair:
    parent: MatrixCoord
    child: MatrixCoord


@dataclass(frozen=True)
class NextNode:
    id: str
    is_primary: bool = False


@dataclass(frozen=True)
class WorkflowStepNode:
    id: str
    workflow_id: str
    name: str
    node_type: str
    order: int
    next_nodes: Tuple[NextNode, ...] = ()
    next_steps: Tuple[str, ...] = ()
    prev_steps: Tuple[str, ...] = ()
    is_disabled: bool = False
    display_warning: Optional[str] = None

    @property
    def is_fork(self) -> bool:
        return self.node_type == STEP_TYPE_FORK

    def next_node_ids(self) -> List[str]:
        return [next_node.id for next_node in self.next_nodes]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "workflow_id": self.workflow_id,
            "name": self.name,
            "node_type": self.node_type,
            "order": self.order,
            "next_nodes": [
                {"id": next_node.id, "is_primary": next_node.is_primary}
                for next_node in self.next_nodes
            ],
            "next_steps": list(self.next_steps),
            "prev_steps": list(self.prev_steps),
            "is_disabled": self.is_disabled,
            "display_warning": self.display_warning,
        }


@dataclass(frozen=True)
class StepGraph:
    nodes: Dict[str, WorkflowStepNode]
    occurrences_by_order: Dict[int, int]
    first_node_id: str
    fork_columns: List[int]

    @property
    def max_order(self) -> int:
        return max(self.occurrences_by_order)

    @property
    def max_occurrence(self) -> int:
        return max(self.occurrences_by_order.values())


@dataclass(frozen=True)
class Tile:
    kind: TileKind
    container: TileContainer
    tile_id: str
    own_coord: MatrixCoord
    parent_coord: Optional[MatrixCoord] = None

    @property
    def is_placeholder(self) -> bool:
        return self.kind == TILE_KIND_CONNECTOR and self.tile_id == CONNECTOR_EMPTY

    @property
    def is_connector(self) -> bool:
        return self.kind == TILE_KIND_CONNECTOR


@dataclass
class TileMatrix:
    """Column-major grid of tiles.

    A matrix is owned by the layout call that allocated it. Stages mutate it in
    place and hand the same instance on; nothing outside the pipeline holds a
    reference until the finished layout is returned.
    """

    columns: List[List[Tile]] = field(default_factory=list)

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    @property
    def num_rows(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    def __iter__(self) -> Iterator[List[Tile]]:
        return iter(self.columns)

    def column(self, col: int) -> List[Tile]:
        return list(self.columns[col])

    def contains(self, coord: MatrixCoord) -> bool:
        return 0 <= coord.col < self.num_columns and 0 <= coord.row < self.num_rows

    def tile_at(self, coord: MatrixCoord) -> Tile:
        return self.columns[coord.col][coord.row]

    def replace_tile(self, tile: Tile) -> None:
        coord = tile.own_coord
        self.columns[coord.col][coord.row] = tile

    def tile_ids(self) -> List[List[str]]:
        return [[tile.tile_id for tile in column] for column in self.columns]


@dataclass(frozen=True)
class WorkflowLayout:
    workflow_id: str
    first_node_id: str
    node_lookup: Dict[str, WorkflowStepNode]
    matrix: TileMatrix
    node_coords: Dict[str, MatrixCoord]
    parent_coords: Dict[str, List[MatrixCoord]]
    parent_node_ids: Dict[str, List[str]]
    fork_columns: List[int] = field(default_factory=list)
