from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from typing import Dict, List

from domain.errors import InvalidGraphError
from domain.models import (
    START_NODE_SUFFIX,
    STEP_TYPE_START,
    NextNode,
    StepGraph,
    WorkflowStep,
    WorkflowStepNode,
)

logger = logging.getLogger(__name__)


def start_node_id(workflow_id: str, suffix: str = START_NODE_SUFFIX) -> str:
    return f"{workflow_id}{suffix}"


def build_step_graph(
    steps: Sequence[WorkflowStep],
    workflow_id: str,
    start_node_suffix: str = START_NODE_SUFFIX,
) -> StepGraph:
    """Turn the flat step list into a node lookup with a synthetic start node.

    The start node sits at order 0 and points at the single order-1 step.
    Fork columns are the node columns (``order * 2``) that hold a decision step.
    """
    first_node_id = start_node_id(workflow_id, start_node_suffix)
    _validate_steps(steps, first_node_id)

    nodes: Dict[str, WorkflowStepNode] = {}
    occurrences: Dict[int, int] = {0: 1}
    fork_columns: List[int] = []
    start_next_nodes: List[NextNode] = []

    for step in steps:
        occurrences[step.order] = occurrences.get(step.order, 0) + 1
        if step.is_fork:
            fork_columns.append(step.order * 2)
        if step.order == 1:
            start_next_nodes = [NextNode(id=step.step_id, is_primary=True)]
        nodes[step.step_id] = WorkflowStepNode(
            id=step.step_id,
            workflow_id=workflow_id,
            name=step.name,
            node_type=step.step_type,
            order=step.order,
            next_nodes=_next_nodes(step),
            next_steps=_next_step_ids(steps, step.order),
            prev_steps=_prev_step_ids(steps, step.order),
            is_disabled=step.is_disabled,
            display_warning=step.warning_message,
        )

    nodes[first_node_id] = WorkflowStepNode(
        id=first_node_id,
        workflow_id=workflow_id,
        name="",
        node_type=STEP_TYPE_START,
        order=0,
        next_nodes=tuple(start_next_nodes),
        next_steps=_next_step_ids(steps, 0),
        prev_steps=(),
    )
    logger.debug(
        "Built step graph for %s: %d nodes, fork columns %s",
        workflow_id,
        len(nodes),
        fork_columns,
    )
    return StepGraph(
        nodes=nodes,
        occurrences_by_order=occurrences,
        first_node_id=first_node_id,
        fork_columns=fork_columns,
    )


def _next_nodes(step: WorkflowStep) -> tuple[NextNode, ...]:
    return tuple(NextNode(id=ref.step_id, is_primary=ref.primary) for ref in step.next_steps)


def _next_step_ids(steps: Sequence[WorkflowStep], order: int) -> tuple[str, ...]:
    return tuple(step.step_id for step in steps if step.order > order)


def _prev_step_ids(steps: Sequence[WorkflowStep], order: int) -> tuple[str, ...]:
    return tuple(step.step_id for step in steps if not step.is_fork and step.order < order)


def _validate_steps(steps: Sequence[WorkflowStep], first_node_id: str) -> None:
    id_counts = Counter(step.step_id for step in steps)
    duplicates = sorted(step_id for step_id, count in id_counts.items() if count > 1)
    if duplicates:
        msg = f"Duplicate step ids: {', '.join(duplicates)}"
        raise InvalidGraphError(msg)
    if first_node_id in id_counts:
        msg = f"Step id {first_node_id} collides with the start node id"
        raise InvalidGraphError(msg)

    roots = [step.step_id for step in steps if step.order == 1]
    if steps and not roots:
        msg = "Workflow has no step with order 1"
        raise InvalidGraphError(msg)
    if len(roots) > 1:
        msg = f"Only one step may have order 1, got: {', '.join(roots)}"
        raise InvalidGraphError(msg)

    forks = [step.step_id for step in steps if step.is_fork]
    if len(forks) > 1:
        msg = f"Only one fork step is supported, got: {', '.join(forks)}"
        raise InvalidGraphError(msg)

    order_by_id = {step.step_id: step.order for step in steps}
    for step in steps:
        if len(step.next_steps) > 1 and not step.is_fork:
            msg = f"Step {step.step_id} has several next steps but is not a fork"
            raise InvalidGraphError(msg)
        for ref in step.next_steps:
            target_order = order_by_id.get(ref.step_id)
            if target_order is None:
                msg = f"Step {step.step_id} points at unknown step {ref.step_id}"
                raise InvalidGraphError(msg)
            if target_order <= step.order:
                msg = (
                    f"Step {step.step_id} (order {step.order}) points at "
                    f"{ref.step_id} (order {target_order}); next steps must have a greater order"
                )
                raise InvalidGraphError(msg)

    reachable = _reachable_step_ids(steps, roots)
    unreachable = [step.step_id for step in steps if step.step_id not in reachable]
    if unreachable:
        msg = f"Steps not reachable from the start node: {', '.join(unreachable)}"
        raise InvalidGraphError(msg)


def _reachable_step_ids(steps: Sequence[WorkflowStep], roots: Sequence[str]) -> set[str]:
    next_ids = {step.step_id: [ref.step_id for ref in step.next_steps] for step in steps}
    reachable = set(roots)
    pending = list(roots)
    while pending:
        for next_id in next_ids[pending.pop()]:
            if next_id not in reachable:
                reachable.add(next_id)
                pending.append(next_id)
    return reachable
