"""Timeline reconstruction: rebuild the subtree under a root event."""

from __future__ import annotations

import logging
from typing import Dict, List

from ..errors import NotFoundError
from ..models.event import Event
from ..models.insights import TimelineNode
from .event_store import EventStore

logger = logging.getLogger(__name__)


def collect_descendants(event_store: EventStore, root: Event) -> List[Event]:
    """Return *root* followed by every event reachable through child links.

    Expansion is level by level; an event already collected is never
    expanded again, so cyclic parent data terminates.
    """
    collected: Dict[str, Event] = {root.event_id: root}
    frontier = [root.event_id]
    while frontier:
        next_frontier = []
        for child in event_store.find_children(frontier):
            if child.event_id in collected:
                continue
            collected[child.event_id] = child
            next_frontier.append(child.event_id)
        frontier = next_frontier
    return list(collected.values())


def assemble_tree(root_event_id: str, events: List[Event]) -> TimelineNode | None:
    """Attach each event to its parent; return the node for *root_event_id*.

    Events whose parent is not among *events* are dropped, except the root.
    """
    nodes = {event.event_id: TimelineNode(event) for event in events}
    root = nodes.get(root_event_id)
    if root is None:
        return None

    for node in nodes.values():
        if node is root:
            continue
        parent = nodes.get(node.event.parent_event_id)
        if parent is not None:
            parent.children.append(node)

    for node in nodes.values():
        node.children.sort(key=lambda child: (child.event.start_date, child.event.event_id))
    return root


def build_tree(event_store: EventStore, root_event_id: str) -> TimelineNode:
    """Return the timeline rooted at *root_event_id*; raises :class:`NotFoundError`."""
    root = event_store.get(root_event_id)
    if root is None:
        raise NotFoundError("Event not found")

    events = collect_descendants(event_store, root)
    logger.info("Timeline for %s spans %d events", root_event_id, len(events))
    return assemble_tree(root_event_id, events)


__all__ = ["collect_descendants", "assemble_tree", "build_tree"]
