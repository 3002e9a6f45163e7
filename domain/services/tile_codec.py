from __future__ import annotations

from typing import Any, Dict, List, cast

from domain.models import (
    TILE_CONTAINERS,
    TILE_KINDS,
    MatrixCoord,
    Tile,
    TileContainer,
    TileKind,
    TileMatrix,
    WorkflowLayout,
)

COORD_DELIMITER = ","
TILE_DELIMITER = "|"


def encode_coord(coord: MatrixCoord) -> str:
    return f"{coord.col}{COORD_DELIMITER}{coord.row}"


def decode_coord(value: str) -> MatrixCoord:
    parts = str(value).split(COORD_DELIMITER)
    if len(parts) != 2:
        msg = f"Invalid matrix coordinate: {value!r}"
        raise ValueError(msg)
    try:
        col, row = (int(part) for part in parts)
    except ValueError as exc:
        msg = f"Invalid matrix coordinate: {value!r}"
        raise ValueError(msg) from exc
    return MatrixCoord(col=col, row=row)


def encode_tile(tile: Tile) -> str:
    if TILE_DELIMITER in tile.tile_id:
        msg = f"Tile id must not contain {TILE_DELIMITER!r}: {tile.tile_id!r}"
        raise ValueError(msg)
    fields = [tile.kind, tile.container, tile.tile_id, encode_coord(tile.own_coord)]
    if tile.parent_coord is not None:
        fields.append(encode_coord(tile.parent_coord))
    return TILE_DELIMITER.join(fields)


def decode_tile(value: str) -> Tile:
    parts = str(value).split(TILE_DELIMITER)
    if len(parts) not in (4, 5):
        msg = f"Invalid tile entry: {value!r}"
        raise ValueError(msg)
    kind, container, tile_id, own = parts[:4]
    if kind not in TILE_KINDS:
        msg = f"Unknown tile kind {kind!r} in {value!r}"
        raise ValueError(msg)
    if container not in TILE_CONTAINERS:
        msg = f"Unknown tile container {container!r} in {value!r}"
        raise ValueError(msg)
    parent = decode_coord(parts[4]) if len(parts) == 5 else None
    return Tile(
        kind=cast(TileKind, kind),
        container=cast(TileContainer, container),
        tile_id=tile_id,
        own_coord=decode_coord(own),
        parent_coord=parent,
    )


def is_placeholder(entry: Tile | str) -> bool:
    tile = decode_tile(entry) if isinstance(entry, str) else entry
    return tile.is_placeholder


def encode_matrix(matrix: TileMatrix) -> List[List[str]]:
    return [[encode_tile(tile) for tile in column] for column in matrix]


def serialize_layout(layout: WorkflowLayout) -> Dict[str, Any]:
    return {
        "workflow_id": layout.workflow_id,
        "first_node_id": layout.first_node_id,
        "num_columns": layout.matrix.num_columns,
        "num_rows": layout.matrix.num_rows,
        "matrix": encode_matrix(layout.matrix),
        "nodes": {
            node_id: node.to_dict() for node_id, node in sorted(layout.node_lookup.items())
        },
        "node_coords": {
            node_id: encode_coord(coord) for node_id, coord in layout.node_coords.items()
        },
        "parent_node_ids": {
            node_id: list(parent_ids) for node_id, parent_ids in layout.parent_node_ids.items()
        },
    }
