from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional
import logging

from models import MenuNode

logger = logging.getLogger(__name__)

# Fixed hierarchy loaded at startup: a single root chain five levels deep.
SAMPLE_MENU_CHAIN = [
    ("1", "system_management", "System Management"),
    ("1-1", "system_mgmt", "System Management"),
    ("1-1-1", "systems", "Systems"),
    ("1-1-1-1", "system_code", "System Code"),
    ("1-1-1-1-1", "code_registration", "Code Registration"),
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MenuStore:
    """Volatile, in-memory keyed collection of menu nodes.

    Next to the id -> node map the store keeps a parent index
    (parent id -> child ids, ``None`` for roots) so subtree walks cost
    proportional to the subtree rather than the whole collection. The index
    is only changed through :meth:`add`, :meth:`remove` and
    :meth:`set_parent`; callers must not assign ``parent_id`` directly.
    """

    def __init__(self):
        self._nodes: Dict[str, MenuNode] = {}
        self._children: Dict[Optional[str], List[str]] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get(self, node_id: Optional[str]) -> Optional[MenuNode]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def all(self) -> List[MenuNode]:
        return list(self._nodes.values())

    def child_ids(self, parent_id: Optional[str]) -> List[str]:
        return list(self._children.get(parent_id, ()))

    def children_of(self, parent_id: Optional[str]) -> List[MenuNode]:
        return [self._nodes[child_id] for child_id in self._children.get(parent_id, ())]

    def add(self, node: MenuNode) -> MenuNode:
        if node.id in self._nodes:
            raise ValueError(f"Duplicate menu id: {node.id}")
        self._nodes[node.id] = node
        self._children.setdefault(node.parent_id, []).append(node.id)
        return node

    def remove(self, node_id: str) -> MenuNode:
        """Remove a single node. Its children must already be gone."""
        if self._children.get(node_id):
            raise ValueError(f"Menu {node_id} still has children")
        node = self._nodes.pop(node_id)
        self._unlink(node.parent_id, node_id)
        self._children.pop(node_id, None)
        return node

    def set_parent(self, node_id: str, parent_id: Optional[str]) -> None:
        node = self._nodes[node_id]
        if node.parent_id == parent_id:
            return
        self._unlink(node.parent_id, node_id)
        node.parent_id = parent_id
        self._children.setdefault(parent_id, []).append(node_id)

    def iter_descendants(self, node_id: str) -> Iterator[MenuNode]:
        """Yield every descendant of ``node_id`` (pre-order, node excluded)."""
        stack = list(reversed(self._children.get(node_id, ())))
        seen = {node_id}
        while stack:
            child_id = stack.pop()
            if child_id in seen:
                logger.warning(f"Cycle detected below menu {node_id} at {child_id}")
                continue
            seen.add(child_id)
            yield self._nodes[child_id]
            stack.extend(reversed(self._children.get(child_id, ())))

    def clear(self) -> None:
        self._nodes.clear()
        self._children.clear()

    def seed_sample_data(self) -> None:
        """Replace the contents with the sample hierarchy."""
        self.clear()
        parent_id = None
        for depth, (node_id, name, label) in enumerate(SAMPLE_MENU_CHAIN, start=1):
            now = utc_now()
            self.add(
                MenuNode(
                    id=node_id,
                    name=name,
                    label=label,
                    depth=depth,
                    order=0,
                    parent_id=parent_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            parent_id = node_id
        logger.info(f"Seeded menu store with {len(self)} sample menus")

    def _unlink(self, parent_id: Optional[str], node_id: str) -> None:
        siblings = self._children.get(parent_id)
        if not siblings:
            return
        try:
            siblings.remove(node_id)
        except ValueError:
            logger.warning(f"Menu {node_id} missing from child index of {parent_id}")
        if not siblings:
            del self._children[parent_id]


def init_store(seed: bool = True) -> MenuStore:
    """Create the process-wide menu store, optionally loading sample data."""
    store = MenuStore()
    if seed:
        store.seed_sample_data()
    return store
