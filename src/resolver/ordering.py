"""Topological ordering of orbs by their declared dependencies."""

from __future__ import annotations

import logging
from typing import Iterable, List

from resolver.graph import ResolutionGraph
from resolver.models import ResolutionResult, VersionedOrb

logger = logging.getLogger(__name__)


def resolve(orbs: Iterable[VersionedOrb]) -> ResolutionResult:
    """Order orbs so that each one follows everything it depends on.

    The ready frontier is peeled off repeatedly until none is left. Orbs that
    never become ready (cycles, missing or illegible dependencies) are
    reported in ``unresolved`` rather than raised.

    Args:
        orbs: Orbs to order, unique by ref.

    Returns:
        ResolutionResult: Ordered orbs plus illegible and unresolved reports.
    """
    graph = ResolutionGraph.build(orbs)
    ordered: List[VersionedOrb] = []

    while True:
        frontier = graph.ready_frontier()
        if not frontier:
            break

        for ref in frontier:
            ordered.append(graph.remove(ref))

        logger.info(
            "resolver running; %d newly resolved, %d resolved in total, %d remaining",
            len(frontier),
            len(ordered),
            len(graph),
        )

    logger.info("resolver done; %d resolved, %d unresolvable", len(ordered), len(graph))

    return ResolutionResult(
        ordered=ordered,
        illegible=list(graph.illegible),
        unresolved=graph.unresolved(),
    )
