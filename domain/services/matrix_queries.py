from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Dict, List, Optional, TypeVar

from domain.models import CoordPair, MatrixCoord, Tile

K = TypeVar("K", bound=Hashable)
V = TypeVar("V", bound=Hashable)


def first_unoccupied_in_col(column: Sequence[Tile]) -> int:
    for row, tile in enumerate(column):
        if tile.is_placeholder:
            return row
    return -1


def last_node_in_col(column: Sequence[Tile]) -> int:
    for row in range(len(column) - 1, -1, -1):
        if not column[row].is_connector:
            return row
    return -1


def last_occupied_in_col(column: Sequence[Tile]) -> int:
    for row in range(len(column) - 1, -1, -1):
        if not column[row].is_placeholder:
            return row
    return -1


def create_coord_pairs(
    node_coords: Mapping[str, MatrixCoord],
    parent_coords: Mapping[str, Iterable[MatrixCoord]],
) -> List[CoordPair]:
    return [
        CoordPair(parent=parent_coord, child=node_coords[node_id])
        for node_id, coords in parent_coords.items()
        for parent_coord in coords
    ]


def invert_mapping(mapping: Mapping[K, V]) -> Dict[V, K]:
    return {value: key for key, value in mapping.items()}


def find_next_node(
    plus_button_coord: MatrixCoord,
    coord_to_node_id: Mapping[MatrixCoord, str],
    candidate_next_node_ids: Iterable[str],
) -> Optional[str]:
    """Resolve which node follows an "add step" affordance.

    Candidates sit to the right of the affordance, so only rows matter: the
    next node is the lowest candidate that is not below the affordance row.
    """
    node_id_to_coord = invert_mapping(coord_to_node_id)
    candidate_coords = [
        node_id_to_coord[node_id]
        for node_id in candidate_next_node_ids
        if node_id in node_id_to_coord
    ]
    eligible = [coord for coord in candidate_coords if coord.row <= plus_button_coord.row]
    if not eligible:
        return None
    next_coord = max(eligible, key=lambda coord: coord.row)
    return coord_to_node_id[next_coord]
