from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

LAYOUT_SUFFIX = ".layout.json"

# A JSON string literal or a // comment running to the end of the line.
_STRING_OR_COMMENT = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*')


def iter_workflow_paths(directory: Path) -> Iterable[Path]:
    for path in directory.glob("*.json"):
        if path.name.endswith(LAYOUT_SUFFIX):
            continue
        yield path


def layout_path_for(workflow_path: Path, output_dir: Path) -> Path:
    return output_dir / f"{workflow_path.stem}{LAYOUT_SUFFIX}"


def strip_json_comments(content: str) -> str:
    """Drop ``//`` comments that sit outside string literals."""
    return _STRING_OR_COMMENT.sub(
        lambda match: match.group(0) if match.group(0).startswith('"') else "", content
    )
