from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Dict, List, Optional

from domain.errors import LayoutCollisionError
from domain.models import (
    CONTAINER_DIAMOND,
    TILE_KIND_FORK,
    TILE_KIND_NODE,
    MatrixCoord,
    StepGraph,
    Tile,
    TileMatrix,
)
from domain.services.branch_sort import get_sorted_next_nodes
from domain.services.matrix_queries import first_unoccupied_in_col

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    matrix: TileMatrix
    node_coords: Dict[str, MatrixCoord]
    parent_coords: Dict[str, List[MatrixCoord]]
    parent_node_ids: Dict[str, List[str]]


def add_node_to_matrix(
    matrix: TileMatrix,
    col: int,
    node_id: str,
    parent_coord: Optional[MatrixCoord] = None,
) -> MatrixCoord:
    """Place a step in ``col`` and return where it landed.

    Without a parent the step takes the first free row. With one it takes the
    parent's row or the first free row, whichever is lower in the grid.
    """
    column = matrix.column(col)
    first_free = first_unoccupied_in_col(column)
    if first_free < 0:
        msg = f"No free row in column {col} for step {node_id}"
        raise LayoutCollisionError(msg)
    row = max(parent_coord.row, first_free) if parent_coord is not None else first_free

    existing = column[row]
    if not existing.is_placeholder:
        msg = (
            f"Step {node_id} would overwrite {existing.tile_id} at column {col}, row {row}"
        )
        raise LayoutCollisionError(msg)

    kind = TILE_KIND_FORK if existing.container == CONTAINER_DIAMOND else TILE_KIND_NODE
    coord = MatrixCoord(col=col, row=row)
    matrix.replace_tile(
        Tile(kind=kind, container=existing.container, tile_id=node_id, own_coord=coord)
    )
    return coord


def anchor_parent_coord(
    parent_ids: Sequence[str], node_coords: Mapping[str, MatrixCoord]
) -> Optional[MatrixCoord]:
    if not parent_ids:
        return None
    ordered = sorted(parent_ids, key=lambda parent_id: node_coords[parent_id].row)
    return node_coords[ordered[0]]


def place_nodes(graph: StepGraph, matrix: TileMatrix) -> Placement:
    """Assign every reachable step to a cell, primary branches first.

    Steps leave the queue by ``order + index / sibling_count``; the sibling
    index comes from the closest-common-descendant order, so the primary branch
    claims the upper rows of each column before its siblings.
    """
    nodes = graph.nodes
    node_coords: Dict[str, MatrixCoord] = {}
    parent_coords: Dict[str, List[MatrixCoord]] = {}
    parent_node_ids: Dict[str, List[str]] = {}

    tie_breaker = itertools.count()
    to_explore: List[tuple[float, int, str]] = [(0.0, next(tie_breaker), graph.first_node_id)]
    explored = {graph.first_node_id}

    while to_explore:
        _, _, node_id = heapq.heappop(to_explore)
        node = nodes[node_id]

        anchor = anchor_parent_coord(parent_node_ids.get(node_id, []), node_coords)
        coord = add_node_to_matrix(matrix, node.order * 2, node_id, anchor)
        node_coords[node_id] = coord
        logger.debug("Placed %s at column %d, row %d", node_id, coord.col, coord.row)

        sorted_next_nodes = get_sorted_next_nodes(node.next_nodes, nodes)
        for index, next_id in enumerate(sorted_next_nodes):
            parent_coords.setdefault(next_id, []).append(coord)
            parent_node_ids.setdefault(next_id, []).append(node_id)
            if next_id in explored:
                continue
            priority = nodes[next_id].order + index / len(sorted_next_nodes)
            heapq.heappush(to_explore, (priority, next(tie_breaker), next_id))
            explored.add(next_id)

    return Placement(
        matrix=matrix,
        node_coords=node_coords,
        parent_coords=parent_coords,
        parent_node_ids=parent_node_ids,
    )
