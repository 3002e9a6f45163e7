from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from adapters.layout.allocation import allocate_matrix
from adapters.layout.connectors import route_connectors
from adapters.layout.placement import place_nodes
from domain.models import START_NODE_SUFFIX, WorkflowDefinition, WorkflowLayout, WorkflowStep
from domain.ports.layout import LayoutEngine
from domain.services.build_step_graph import build_step_graph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutConfig:
    start_node_suffix: str = START_NODE_SUFFIX
    add_branch_affordance: bool = True


class MatrixLayoutEngine(LayoutEngine):
    """Lays a workflow out on a grid of node and connector tiles.

    Even columns hold steps (column ``order * 2``), odd columns hold connectors.
    Every call recomputes the layout from a freshly allocated matrix.
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def build_layout(self, definition: WorkflowDefinition) -> WorkflowLayout:
        return self.layout_steps(definition.steps, definition.workflow_id)

    def layout_steps(self, steps: Sequence[WorkflowStep], workflow_id: str) -> WorkflowLayout:
        graph = build_step_graph(steps, workflow_id, self.config.start_node_suffix)
        matrix = allocate_matrix(graph.occurrences_by_order, graph.fork_columns)
        logger.debug(
            "Allocated %dx%d matrix for workflow %s",
            matrix.num_columns,
            matrix.num_rows,
            workflow_id,
        )

        placement = place_nodes(graph, matrix)
        fork_columns = graph.fork_columns if self.config.add_branch_affordance else []
        routing = route_connectors(
            placement.matrix,
            placement.node_coords,
            placement.parent_coords,
            fork_columns,
        )

        return WorkflowLayout(
            workflow_id=workflow_id,
            first_node_id=graph.first_node_id,
            node_lookup=graph.nodes,
            matrix=routing.matrix,
            node_coords=placement.node_coords,
            parent_coords=placement.parent_coords,
            parent_node_ids=placement.parent_node_ids,
            fork_columns=list(graph.fork_columns),
        )
