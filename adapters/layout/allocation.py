from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import List

from domain.models import (
    CONNECTOR_EMPTY,
    CONTAINER_BOX,
    CONTAINER_DIAMOND,
    CONTAINER_STANDARD,
    TILE_KIND_CONNECTOR,
    MatrixCoord,
    Tile,
    TileContainer,
    TileMatrix,
)


def matrix_dimensions(
    occurrences_by_order: Mapping[int, int], fork_columns: Sequence[int]
) -> tuple[int, int]:
    if not occurrences_by_order:
        return 1, 1
    num_columns = max(occurrences_by_order) * 2 + 1
    # One spare row under the fork holds the dashed "add branch" affordance.
    num_rows = max(occurrences_by_order.values()) + (1 if fork_columns else 0)
    return num_columns, num_rows


def column_containers(num_columns: int, fork_columns: Sequence[int]) -> List[TileContainer]:
    containers: List[TileContainer] = []
    for col in range(num_columns):
        if col % 2 == 1:
            containers.append(CONTAINER_STANDARD)
        elif col in fork_columns:
            containers.append(CONTAINER_DIAMOND)
        else:
            containers.append(CONTAINER_BOX)
    return containers


def init_column(num_rows: int, col: int, container: TileContainer) -> List[Tile]:
    return [
        Tile(
            kind=TILE_KIND_CONNECTOR,
            container=container,
            tile_id=CONNECTOR_EMPTY,
            own_coord=MatrixCoord(col=col, row=row),
        )
        for row in range(num_rows)
    ]


def init_matrix(num_rows: int, containers: Sequence[TileContainer]) -> TileMatrix:
    return TileMatrix(
        columns=[init_column(num_rows, col, container) for col, container in enumerate(containers)]
    )


def allocate_matrix(
    occurrences_by_order: Mapping[int, int], fork_columns: Sequence[int]
) -> TileMatrix:
    num_columns, num_rows = matrix_dimensions(occurrences_by_order, fork_columns)
    return init_matrix(num_rows, column_containers(num_columns, fork_columns))
