from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import List

from domain.errors import LayoutCollisionError
from domain.models import (
    CONNECTOR_ARROW_RIGHT,
    CONNECTOR_ARROW_UP,
    CONNECTOR_DOWN_RIGHT,
    CONNECTOR_DOWN_RIGHT_DASH,
    CONNECTOR_LINE_HORIZ,
    CONNECTOR_LINE_VERT,
    CONNECTOR_RIGHT_UP,
    CONNECTOR_RIGHT_UP_ARROW,
    CONTAINER_DIAMOND,
    TILE_KIND_CONNECTOR,
    CoordPair,
    MatrixCoord,
    Tile,
    TileMatrix,
)
from domain.services.matrix_queries import (
    create_coord_pairs,
    last_node_in_col,
    last_occupied_in_col,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectorToPlace:
    own_coord: MatrixCoord
    parent_coord: MatrixCoord
    connector_name: str


@dataclass(frozen=True)
class Routing:
    matrix: TileMatrix
    right_up_coords: List[MatrixCoord]


def create_line_horizes(
    start_col: int, end_col: int, row: int, parent_coord: MatrixCoord
) -> tuple[List[ConnectorToPlace], MatrixCoord]:
    """Horizontal lines on ``row`` for columns ``start_col`` up to ``end_col``.

    Each line points back at the tile before it; the last coordinate of the run
    is returned so the closing tile can chain onto it.
    """
    lines: List[ConnectorToPlace] = []
    current_parent = parent_coord
    for col in range(start_col, end_col):
        own = MatrixCoord(col=col, row=row)
        lines.append(
            ConnectorToPlace(
                own_coord=own, parent_coord=current_parent, connector_name=CONNECTOR_LINE_HORIZ
            )
        )
        current_parent = own
    return lines, current_parent


def create_horiz_connectors_between_nodes(pair: CoordPair) -> List[ConnectorToPlace]:
    parent, child = pair.parent, pair.child

    if parent.row == child.row:
        end_col = child.col - 1
        lines, last_coord = create_line_horizes(parent.col + 1, end_col, parent.row, parent)
        arrow = ConnectorToPlace(
            own_coord=MatrixCoord(col=end_col, row=parent.row),
            parent_coord=last_coord,
            connector_name=CONNECTOR_ARROW_RIGHT,
        )
        return [*lines, arrow]

    if parent.row < child.row:
        end_col = child.col - 1
        # The corner points at an empty slot so the "add step" control is not
        # drawn twice for the same parent.
        corner = ConnectorToPlace(
            own_coord=MatrixCoord(col=parent.col, row=child.row),
            parent_coord=MatrixCoord(col=parent.col - 1, row=child.row),
            connector_name=CONNECTOR_DOWN_RIGHT,
        )
        lines, last_coord = create_line_horizes(parent.col + 1, end_col, child.row, parent)
        arrow = ConnectorToPlace(
            own_coord=MatrixCoord(col=end_col, row=child.row),
            parent_coord=last_coord,
            connector_name=CONNECTOR_ARROW_RIGHT,
        )
        return [corner, *lines, arrow]

    lines, last_coord = create_line_horizes(parent.col + 1, child.col, parent.row, parent)
    corner_name = (
        CONNECTOR_RIGHT_UP_ARROW if parent.row - child.row == 1 else CONNECTOR_RIGHT_UP
    )
    corner = ConnectorToPlace(
        own_coord=MatrixCoord(col=child.col, row=parent.row),
        parent_coord=last_coord,
        connector_name=corner_name,
    )
    return [*lines, corner]


def add_connector_to_matrix(
    matrix: TileMatrix,
    connector: ConnectorToPlace,
    node_coords: Collection[MatrixCoord],
) -> Tile:
    existing = matrix.tile_at(connector.own_coord)
    if not existing.is_connector:
        coord = connector.own_coord
        msg = (
            f"Connector {connector.connector_name} would overwrite step {existing.tile_id} "
            f"at column {coord.col}, row {coord.row}"
        )
        raise LayoutCollisionError(msg)
    parent = connector.parent_coord if connector.parent_coord in node_coords else None
    tile = Tile(
        kind=existing.kind,
        container=existing.container,
        tile_id=connector.connector_name,
        own_coord=connector.own_coord,
        parent_coord=parent,
    )
    matrix.replace_tile(tile)
    return tile


def get_right_up_coords(connectors: Iterable[ConnectorToPlace]) -> List[MatrixCoord]:
    return [
        connector.own_coord
        for connector in connectors
        if connector.connector_name == CONNECTOR_RIGHT_UP
    ]


def add_vert_connectors_to_matrix(matrix: TileMatrix, start_coord: MatrixCoord) -> None:
    """Draw a vertical run upward from a right-up corner until a used tile."""
    column = matrix.column(start_coord.col)
    for row in range(start_coord.row - 1, 0, -1):
        current = column[row]
        if not current.is_placeholder:
            break
        above = column[row - 1]
        name = (
            CONNECTOR_LINE_VERT
            if above.is_placeholder or above.is_connector
            else CONNECTOR_ARROW_UP
        )
        matrix.replace_tile(replace(current, tile_id=name))


def down_right_dashes_to_place(
    matrix: TileMatrix, fork_columns: Sequence[int]
) -> List[Tile]:
    dashes: List[Tile] = []
    for col in fork_columns:
        column = matrix.column(col)
        parent_row = last_node_in_col(column)
        row = last_occupied_in_col(column) + 1
        if row >= matrix.num_rows:
            msg = f"No room for the add-branch connector under the fork in column {col}"
            raise LayoutCollisionError(msg)
        dashes.append(
            Tile(
                kind=TILE_KIND_CONNECTOR,
                container=CONTAINER_DIAMOND,
                tile_id=CONNECTOR_DOWN_RIGHT_DASH,
                own_coord=MatrixCoord(col=col, row=row),
                parent_coord=MatrixCoord(col=col, row=parent_row),
            )
        )
    return dashes


def route_connectors(
    matrix: TileMatrix,
    node_coords: Mapping[str, MatrixCoord],
    parent_coords: Mapping[str, Sequence[MatrixCoord]],
    fork_columns: Sequence[int] = (),
) -> Routing:
    connectors = [
        connector
        for pair in create_coord_pairs(node_coords, parent_coords)
        for connector in create_horiz_connectors_between_nodes(pair)
    ]
    placed_coords = set(node_coords.values())
    for connector in connectors:
        add_connector_to_matrix(matrix, connector, placed_coords)

    right_up_coords = get_right_up_coords(connectors)
    for coord in right_up_coords:
        add_vert_connectors_to_matrix(matrix, coord)

    for dash in down_right_dashes_to_place(matrix, fork_columns):
        matrix.replace_tile(dash)

    logger.debug(
        "Routed %d connectors, %d vertical runs", len(connectors), len(right_up_coords)
    )
    return Routing(matrix=matrix, right_up_coords=right_up_coords)
