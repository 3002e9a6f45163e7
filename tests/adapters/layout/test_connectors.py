from __future__ import annotations

import pytest

from adapters.layout.allocation import init_matrix
from adapters.layout.connectors import (
    ConnectorToPlace,
    add_connector_to_matrix,
    add_vert_connectors_to_matrix,
    create_horiz_connectors_between_nodes,
    create_line_horizes,
    down_right_dashes_to_place,
    get_right_up_coords,
)
from domain.errors import LayoutCollisionError
from domain.models import (
    CONNECTOR_ARROW_RIGHT,
    CONNECTOR_DOWN_RIGHT,
    CONNECTOR_LINE_HORIZ,
    CONNECTOR_RIGHT_UP,
    CONNECTOR_RIGHT_UP_ARROW,
    CONTAINER_BOX,
    CONTAINER_DIAMOND,
    CONTAINER_STANDARD,
    TILE_KIND_FORK,
    TILE_KIND_NODE,
    CoordPair,
    MatrixCoord,
    Tile,
)


def _names(connectors: list[ConnectorToPlace]) -> list[tuple[int, int, str]]:
    return [
        (connector.own_coord.col, connector.own_coord.row, connector.connector_name)
        for connector in connectors
    ]


def test_line_horizes_chain_parents() -> None:
    lines, last = create_line_horizes(3, 5, 1, MatrixCoord(2, 1))

    assert [line.parent_coord for line in lines] == [MatrixCoord(2, 1), MatrixCoord(3, 1)]
    assert last == MatrixCoord(4, 1)


def test_same_row_connectors() -> None:
    connectors = create_horiz_connectors_between_nodes(
        CoordPair(MatrixCoord(0, 0), MatrixCoord(3, 0))
    )

    assert _names(connectors) == [
        (1, 0, CONNECTOR_LINE_HORIZ),
        (2, 0, CONNECTOR_ARROW_RIGHT),
    ]
    assert connectors[0].parent_coord == MatrixCoord(0, 0)
    assert connectors[1].parent_coord == MatrixCoord(1, 0)


def test_parent_above_child_connectors() -> None:
    connectors = create_horiz_connectors_between_nodes(
        CoordPair(MatrixCoord(2, 0), MatrixCoord(6, 2))
    )

    assert _names(connectors) == [
        (2, 2, CONNECTOR_DOWN_RIGHT),
        (3, 2, CONNECTOR_LINE_HORIZ),
        (4, 2, CONNECTOR_LINE_HORIZ),
        (5, 2, CONNECTOR_ARROW_RIGHT),
    ]
    assert connectors[0].parent_coord == MatrixCoord(1, 2)
    assert connectors[1].parent_coord == MatrixCoord(2, 0)


def test_parent_below_child_connectors() -> None:
    connectors = create_horiz_connectors_between_nodes(
        CoordPair(MatrixCoord(2, 4), MatrixCoord(5, 0))
    )

    assert _names(connectors) == [
        (3, 4, CONNECTOR_LINE_HORIZ),
        (4, 4, CONNECTOR_LINE_HORIZ),
        (5, 4, CONNECTOR_RIGHT_UP),
    ]
    assert get_right_up_coords(connectors) == [MatrixCoord(5, 4)]


def test_one_row_up_ends_with_arrow() -> None:
    connectors = create_horiz_connectors_between_nodes(
        CoordPair(MatrixCoord(4, 1), MatrixCoord(6, 0))
    )

    assert _names(connectors) == [
        (5, 1, CONNECTOR_LINE_HORIZ),
        (6, 1, CONNECTOR_RIGHT_UP_ARROW),
    ]
    assert get_right_up_coords(connectors) == []


def test_add_connector_keeps_parent_only_for_nodes() -> None:
    matrix = init_matrix(1, [CONTAINER_BOX, CONTAINER_STANDARD, CONTAINER_STANDARD])
    node_coords = {MatrixCoord(0, 0)}

    first = add_connector_to_matrix(
        matrix,
        ConnectorToPlace(MatrixCoord(1, 0), MatrixCoord(0, 0), CONNECTOR_LINE_HORIZ),
        node_coords,
    )
    second = add_connector_to_matrix(
        matrix,
        ConnectorToPlace(MatrixCoord(2, 0), MatrixCoord(1, 0), CONNECTOR_ARROW_RIGHT),
        node_coords,
    )

    assert first.parent_coord == MatrixCoord(0, 0)
    assert second.parent_coord is None
    assert second.container == CONTAINER_STANDARD
    assert matrix.tile_at(MatrixCoord(2, 0)) == second


def test_add_connector_refuses_to_overwrite_node() -> None:
    matrix = init_matrix(1, [CONTAINER_BOX])
    matrix.replace_tile(Tile(TILE_KIND_NODE, CONTAINER_BOX, "step", MatrixCoord(0, 0)))

    with pytest.raises(LayoutCollisionError, match="step"):
        add_connector_to_matrix(
            matrix,
            ConnectorToPlace(MatrixCoord(0, 0), MatrixCoord(0, 0), CONNECTOR_LINE_HORIZ),
            set(),
        )


def test_vertical_run_ends_with_arrow_under_node() -> None:
    matrix = init_matrix(4, [CONTAINER_BOX])
    matrix.replace_tile(Tile(TILE_KIND_NODE, CONTAINER_BOX, "target", MatrixCoord(0, 0)))
    matrix.replace_tile(
        Tile("connector", CONTAINER_BOX, CONNECTOR_RIGHT_UP, MatrixCoord(0, 3))
    )

    add_vert_connectors_to_matrix(matrix, MatrixCoord(0, 3))

    assert matrix.tile_ids()[0] == ["target", "arrowUp", "lineVert", "rightUp"]


def test_vertical_run_stops_at_first_used_tile() -> None:
    matrix = init_matrix(4, [CONTAINER_BOX])
    matrix.replace_tile(Tile(TILE_KIND_NODE, CONTAINER_BOX, "target", MatrixCoord(0, 0)))
    matrix.replace_tile(
        Tile("connector", CONTAINER_BOX, CONNECTOR_RIGHT_UP_ARROW, MatrixCoord(0, 1))
    )
    matrix.replace_tile(
        Tile("connector", CONTAINER_BOX, CONNECTOR_RIGHT_UP, MatrixCoord(0, 2))
    )

    add_vert_connectors_to_matrix(matrix, MatrixCoord(0, 2))

    assert matrix.tile_ids()[0] == ["target", "rightUpArrow", "rightUp", "empty"]


def test_dash_goes_under_last_used_row_of_fork_column() -> None:
    matrix = init_matrix(3, [CONTAINER_DIAMOND])
    matrix.replace_tile(Tile(TILE_KIND_FORK, CONTAINER_DIAMOND, "f", MatrixCoord(0, 0)))
    matrix.replace_tile(
        Tile("connector", CONTAINER_DIAMOND, CONNECTOR_DOWN_RIGHT, MatrixCoord(0, 1))
    )

    [dash] = down_right_dashes_to_place(matrix, [0])

    assert dash.own_coord == MatrixCoord(0, 2)
    assert dash.parent_coord == MatrixCoord(0, 0)
    assert dash.container == CONTAINER_DIAMOND


def test_dash_without_room_is_a_collision() -> None:
    matrix = init_matrix(1, [CONTAINER_DIAMOND])
    matrix.replace_tile(Tile(TILE_KIND_FORK, CONTAINER_DIAMOND, "f", MatrixCoord(0, 0)))

    with pytest.raises(LayoutCollisionError):
        down_right_dashes_to_place(matrix, [0])
