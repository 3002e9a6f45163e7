from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Dict, List

from domain.models import NextNode, WorkflowStepNode


def get_path(node_id: str, nodes: Mapping[str, WorkflowStepNode]) -> List[str]:
    """Follow first successors from ``node_id`` down to the sink.

    Nodes below a fork have a single successor, so the first one is the path.
    """
    path = [node_id]
    current = nodes[node_id]
    while current.next_nodes:
        child_id = current.next_nodes[0].id
        path.append(child_id)
        current = nodes[child_id]
    return path


def find_node_with_closest_common_descendant(
    primary_path: Sequence[str],
    nodes_to_sort: Sequence[str],
    paths: Mapping[str, Sequence[str]],
) -> str:
    for path_node in primary_path[1:]:
        candidates = [
            (list(paths[node_id]).index(path_node), node_id)
            for node_id in nodes_to_sort
            if path_node in paths[node_id][1:]
        ]
        if candidates:
            return min(candidates, key=lambda candidate: candidate[0])[1]
    return nodes_to_sort[0]


def closest_common_descendant_sort(
    primary_id: str,
    nodes_to_sort: Sequence[str],
    paths: Mapping[str, Sequence[str]],
) -> List[str]:
    """Order sibling branches by how early each rejoins the previous branch.

    The primary branch comes first; every following branch is the one whose
    path meets the path of the branch placed just before it at the smallest
    index.
    """
    sorted_nodes = [primary_id]
    remaining = list(nodes_to_sort)
    primary_path = paths[primary_id]
    while remaining:
        node_to_add = find_node_with_closest_common_descendant(primary_path, remaining, paths)
        sorted_nodes.append(node_to_add)
        remaining.remove(node_to_add)
        primary_path = paths[node_to_add]
    return sorted_nodes


def get_sorted_next_nodes(
    next_nodes: Sequence[NextNode],
    nodes: Mapping[str, WorkflowStepNode],
) -> List[str]:
    if len(next_nodes) < 2:
        return [next_node.id for next_node in next_nodes]

    primary = next((next_node for next_node in next_nodes if next_node.is_primary), None)
    primary_id = primary.id if primary is not None else next_nodes[0].id
    node_ids = [next_node.id for next_node in next_nodes]
    paths: Dict[str, List[str]] = {node_id: get_path(node_id, nodes) for node_id in node_ids}

    return closest_common_descendant_sort(
        primary_id,
        [node_id for node_id in node_ids if node_id != primary_id],
        paths,
    )
