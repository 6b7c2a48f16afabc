"""
nllfacts.cfg
============

Point-level control-flow graph built from ``cfg_edge`` facts.

The graph may contain loops, so orderings are computed with an explicit
stack rather than recursion.  Worklist solvers use :meth:`reverse_postorder`
for forward problems and :meth:`postorder` for backward ones.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple

from .facts import Point


class ControlFlow:
    """Successor/predecessor index over a set of points."""

    def __init__(self, edges: Iterable[Tuple[Point, Point]], points: Iterable[Point] = ()) -> None:
        self.successors: Dict[Point, List[Point]] = defaultdict(list)
        self.predecessors: Dict[Point, List[Point]] = defaultdict(list)
        nodes: Set[Point] = set(points)
        for p, q in sorted(set(edges)):
            self.successors[p].append(q)
            self.predecessors[q].append(p)
            nodes.add(p)
            nodes.add(q)
        self.points: List[Point] = sorted(nodes)

    def succ(self, point: Point) -> List[Point]:
        return self.successors.get(point, [])

    def pred(self, point: Point) -> List[Point]:
        return self.predecessors.get(point, [])

    def postorder(self) -> List[Point]:
        """Depth-first post-order, starting from the entry points.

        Entry points are points without predecessors; points only reachable
        through a cycle are picked up afterwards in id order.
        """
        visited: Set[Point] = set()
        order: List[Point] = []
        roots = [p for p in self.points if not self.pred(p)]
        roots += [p for p in self.points if self.pred(p)]

        for root in roots:
            if root in visited:
                continue
            visited.add(root)
            stack = [(root, iter(self.succ(root)))]
            while stack:
                node, children = stack[-1]
                for child in children:
                    if child not in visited:
                        visited.add(child)
                        stack.append((child, iter(self.succ(child))))
                        break
                else:
                    stack.pop()
                    order.append(node)
        return order

    def reverse_postorder(self) -> List[Point]:
        order = self.postorder()
        order.reverse()
        return order
