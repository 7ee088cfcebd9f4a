"""
Component 7: Generic Search Engine (A*)

Best-first graph search independent of the blocks world:
- Graph: interface providing the outgoing edges of a node
- Edge / SearchResult: search primitives
- AStarSearch: A* with lazy deletion, FIFO tie-breaking and a wall-clock timeout

Nodes may be any hashable value; node equality decides what counts as
visited. Admissibility of the heuristic is the caller's responsibility.
"""

import heapq
import itertools
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, TypeVar

from component_13_logging_config import PerformanceLogger, get_logger
from shrdlite_exceptions import SearchTimeout

logger = get_logger(__name__)

N = TypeVar("N", bound=Hashable)


# ============================================================================
# Search Primitives
# ============================================================================


@dataclass(frozen=True)
class Edge(Generic[N]):
    """Directed, weighted edge between two nodes."""

    from_node: N
    to_node: N
    cost: float = 1.0


class Graph(ABC, Generic[N]):
    """A graph given implicitly by its successor function."""

    @abstractmethod
    def outgoing_edges(self, node: N) -> List[Edge[N]]:
        """All edges leaving `node`."""


@dataclass
class SearchResult(Generic[N]):
    """
    A path from the start node to a goal node.

    Attributes:
        path: Nodes from start to goal, both included
        cost: Sum of the edge costs along the path
    """

    path: List[N]
    cost: float


@dataclass(order=True)
class SearchNode(Generic[N]):
    """
    Frontier entry of the A* search.

    Ordered by f_score, then by insertion sequence (FIFO among equal costs).
    """

    f_score: float
    sequence: int
    node: N = field(compare=False)
    g_score: float = field(compare=False)
    parent: Optional["SearchNode[N]"] = field(default=None, compare=False)

    def reconstruct_path(self) -> List[N]:
        """Nodes from the root to this entry."""
        path = []
        entry: Optional[SearchNode[N]] = self
        while entry is not None:
            path.append(entry.node)
            entry = entry.parent
        return list(reversed(path))


# ============================================================================
# A* Search
# ============================================================================


class AStarSearch(Generic[N]):
    """
    A* search over an implicit graph.

    Usage:
        engine = AStarSearch(graph, goal=formula.holds, heuristic=h, timeout=10.0)
        result = engine.search(start)   # None when no path exists

    Attributes:
        stats: expansions, generated, elapsed_seconds and path_cost of the last search
    """

    def __init__(
        self,
        graph: Graph[N],
        goal: Callable[[N], bool],
        heuristic: Callable[[N], float],
        timeout: Optional[float] = None,
    ):
        self.graph = graph
        self.goal = goal
        self.heuristic = heuristic
        self.timeout = timeout
        self.stats: Dict[str, Any] = {}

    def search(self, start: N) -> Optional[SearchResult[N]]:
        """
        Find a cheapest path from start to a goal node.

        Returns:
            SearchResult, or None when the frontier is exhausted

        Raises:
            SearchTimeout: The wall-clock limit ran out
        """
        self.stats = {"expansions": 0, "generated": 0, "elapsed_seconds": 0.0, "path_cost": None}
        counter = itertools.count()
        started = time.monotonic()

        frontier: List[SearchNode[N]] = [
            SearchNode(f_score=self.heuristic(start), sequence=next(counter), node=start, g_score=0.0)
        ]
        visited = set()

        with PerformanceLogger(logger.logger, "A* search", timeout=self.timeout):
            try:
                while frontier:
                    if self.timeout is not None and time.monotonic() - started > self.timeout:
                        raise SearchTimeout(
                            f"Search exceeded {self.timeout} seconds after "
                            f"{self.stats['expansions']} expansions",
                            timeout=self.timeout,
                        )

                    current = heapq.heappop(frontier)
                    if current.node in visited:
                        continue

                    if self.goal(current.node):
                        self.stats["path_cost"] = current.g_score
                        logger.info(
                            f"Goal reached, cost {current.g_score}",
                            extra={
                                "expansions": self.stats["expansions"],
                                "generated": self.stats["generated"],
                            },
                        )
                        return SearchResult(path=current.reconstruct_path(), cost=current.g_score)

                    visited.add(current.node)
                    self.stats["expansions"] += 1

                    for edge in self.graph.outgoing_edges(current.node):
                        if edge.to_node in visited:
                            continue
                        g_score = current.g_score + edge.cost
                        heapq.heappush(
                            frontier,
                            SearchNode(
                                f_score=g_score + self.heuristic(edge.to_node),
                                sequence=next(counter),
                                node=edge.to_node,
                                g_score=g_score,
                                parent=current,
                            ),
                        )
                        self.stats["generated"] += 1
            finally:
                self.stats["elapsed_seconds"] = time.monotonic() - started

        logger.info(f"No path found after {self.stats['expansions']} expansions")
        return None
