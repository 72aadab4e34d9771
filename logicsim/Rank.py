from __future__ import annotations
from collections import deque
from logicsim.Gates import Node, Connection


def index(nodes: list[Node], connections: list[Connection]):
    """Number the nodes and build the adjacency between them.

    Returns ``(arena, handles, forward, backward)``: ``arena`` lists the nodes
    by handle, ``handles`` maps an id to its handle, and ``forward[h]`` /
    ``backward[h]`` are the handles fed by / feeding handle ``h``. A repeated
    id keeps its first node. Wires with an endpoint outside the node list
    are dropped.
    """
    arena: list[Node] = []
    handles: dict[str, int] = {}
    for node in nodes:
        if node.id not in handles:
            handles[node.id] = len(arena)
            arena.append(node)

    forward: list[set[int]] = [set() for _ in arena]
    backward: list[set[int]] = [set() for _ in arena]
    for conn in connections:
        source = handles.get(conn.source)
        target = handles.get(conn.target)
        if source is None or target is None:
            continue
        forward[source].add(target)
        backward[target].add(source)
    return arena, handles, forward, backward


def kahn(forward: list[set[int]], backward: list[set[int]]):
    # peel off zero in-degree handles, whatever is left sits on or behind a loop
    degree = [len(sources) for sources in backward]
    queue = deque(h for h, d in enumerate(degree) if d == 0)
    order: list[int] = []
    while queue:
        h = queue.popleft()
        order.append(h)
        for target in forward[h]:
            degree[target] -= 1
            if degree[target] == 0:
                queue.append(target)
    return order, degree


def rank(forward: list[set[int]], backward: list[set[int]]):
    """Evaluation order for every handle plus the set of handles in feedback.

    Acyclic handles come first in dependency order; the cycle set follows
    in handle order.
    """
    order, degree = kahn(forward, backward)
    cycle = [h for h, d in enumerate(degree) if d > 0]
    return order + cycle, set(cycle)


def detect_cycle_connections(nodes: list[Node], connections: list[Connection]) -> list[str]:
    # ids of every wire whose both ends are caught in feedback
    _, handles, forward, backward = index(nodes, connections)
    _, cycle = rank(forward, backward)
    found = []
    for conn in connections:
        source = handles.get(conn.source)
        target = handles.get(conn.target)
        if source in cycle and target in cycle:
            found.append(conn.id)
    return found


def would_create_cycle(connections: list[Connection], source: str, target: str) -> bool:
    """True if a new wire from ``source`` to ``target`` would close a loop."""
    if source == target:
        return True
    adjacency: dict[str, list[str]] = {}
    for conn in connections:
        adjacency.setdefault(conn.source, []).append(conn.target)

    visited = set()
    queue = deque([target])
    while queue:
        current = queue.popleft()
        if current == source:
            return True
        if current in visited:
            continue
        visited.add(current)
        queue.extend(adjacency.get(current, ()))
    return False


def drivers(connections: list[Connection]) -> dict[tuple[str, int], Connection]:
    """Map each driven ``(target, index)`` input pin to the wire feeding it.

    A pin fed by more than one wire keeps the wire with the lowest id.
    """
    table: dict[tuple[str, int], Connection] = {}
    for conn in connections:
        key = (conn.target, conn.index)
        held = table.get(key)
        if held is None or conn.id < held.id:
            table[key] = conn
    return table
