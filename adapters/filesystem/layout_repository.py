from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import orjson

from domain.models import WorkflowLayout
from domain.ports.repositories import LayoutRepository
from domain.services.tile_codec import serialize_layout

logger = logging.getLogger(__name__)

LAYOUT_JSON_OPTIONS = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS | orjson.OPT_APPEND_NEWLINE


def encode_layout_payload(layout: WorkflowLayout) -> bytes:
    return orjson.dumps(serialize_layout(layout), option=LAYOUT_JSON_OPTIONS)


class FileSystemLayoutRepository(LayoutRepository):
    def save(self, layout: WorkflowLayout, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(f"{path.suffix}.tmp")
        tmp_path.write_bytes(encode_layout_payload(layout))
        tmp_path.replace(path)
        logger.debug("Wrote layout for %s to %s", layout.workflow_id, path)

    def load_payload(self, path: Path) -> dict[str, Any]:
        data = orjson.loads(path.read_bytes())
        if not isinstance(data, dict):
            msg = f"Layout file {path} does not hold a JSON object"
            raise ValueError(msg)
        return data
