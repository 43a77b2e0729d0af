"""TaskGraph — NetworkX DAG of build tasks.

Nodes are task names; an edge ``a -> b`` means ``b`` requires ``a``.
Declared once per process and validated for acyclicity on :meth:`validate`.
"""

from __future__ import annotations

from collections.abc import Iterable

import networkx as nx

type _Graph = nx.DiGraph


class TaskGraphError(ValueError):
    """The declared dependencies do not form a DAG."""


class UnknownTaskError(KeyError):
    """A requested task is not declared in the graph."""


class TaskGraph:
    """Directed acyclic graph over task names."""

    def __init__(self) -> None:
        self._graph: _Graph = nx.DiGraph()

    def add_task(self, name: str, *, requires: Iterable[str] = ()) -> None:
        self._graph.add_node(name)
        for prerequisite in requires:
            self._graph.add_edge(prerequisite, name)

    def add_requirement(self, name: str, prerequisite: str) -> None:
        """Declare that *name* requires *prerequisite*."""
        self._graph.add_edge(prerequisite, name)

    def validate(self) -> None:
        """Raise :class:`TaskGraphError` if the graph has a cycle."""
        if nx.is_directed_acyclic_graph(self._graph):
            return
        cycle = nx.find_cycle(self._graph)
        path = " -> ".join([edge[0] for edge in cycle] + [cycle[-1][1]])
        msg = f"Task dependency cycle: {path}"
        raise TaskGraphError(msg)

    def __contains__(self, name: object) -> bool:
        return name in self._graph

    @property
    def tasks(self) -> list[str]:
        return list(self._graph.nodes)

    def requirements(self, name: str) -> set[str]:
        """Direct prerequisites of *name*."""
        self._check(name)
        return set(self._graph.predecessors(name))

    def dependents(self, name: str) -> set[str]:
        """Every task that transitively requires *name*."""
        self._check(name)
        return set(nx.descendants(self._graph, name))

    def closure(self, targets: Iterable[str]) -> set[str]:
        """*targets* plus everything they transitively require."""
        nodes: set[str] = set()
        for target in targets:
            self._check(target)
            nodes.add(target)
            nodes |= nx.ancestors(self._graph, target)
        return nodes

    def plan(self, targets: Iterable[str]) -> list[list[str]]:
        """Topological generations of the closure; each generation may run concurrently."""
        sub = self._graph.subgraph(self.closure(targets))
        return [sorted(generation) for generation in nx.topological_generations(sub)]

    def _check(self, name: str) -> None:
        if name not in self._graph:
            raise UnknownTaskError(name)
