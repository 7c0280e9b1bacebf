import logging
import uuid
from typing import Dict, Iterable, List, Optional

from database import MenuStore, utc_now
from menu_utils import ParentNotFoundError
from models import MenuItem, MenuItemCreate, MenuItemUpdate, MenuNode

logger = logging.getLogger(__name__)


def _sibling_key(node: MenuNode):
    return (node.order, node.created_at, node.id)


def build_forest(
    nodes: Iterable[MenuNode], parent_id: Optional[str] = None
) -> List[MenuItem]:
    """Derive the nested ``children`` view from a flat node collection.

    Nodes are grouped by ``parent_id`` and every group is sorted by ``order``;
    the result holds the nodes directly under ``parent_id`` (``None`` means
    roots), each populated recursively. Nodes pointing at a parent that is
    neither in ``nodes`` nor ``parent_id`` itself are skipped with a warning,
    as are nodes reached twice through a parent cycle.
    """
    nodes = list(nodes)
    known_ids = {node.id for node in nodes}
    known_ids.add(parent_id)

    groups: Dict[Optional[str], List[MenuNode]] = {}
    for node in nodes:
        if node.parent_id is not None and node.parent_id not in known_ids:
            logger.warning(
                f"Menu {node.id} references missing parent {node.parent_id}, skipping"
            )
            continue
        groups.setdefault(node.parent_id, []).append(node)
    for group in groups.values():
        group.sort(key=_sibling_key)

    visited = {parent_id}

    def _build(current_id: Optional[str]) -> List[MenuItem]:
        items = []
        for node in groups.get(current_id, ()):
            if node.id in visited:
                logger.warning(f"Menu {node.id} is part of a parent cycle, skipping")
                continue
            visited.add(node.id)
            items.append(MenuItem(**node.model_dump(), children=_build(node.id)))
        return items

    return _build(parent_id)


class MenuService:
    """Tree-shaped reads and mutations over a :class:`MenuStore`.

    Every mutation keeps ``depth`` equal to the parent's depth + 1 (roots are
    1) and, after create and reorder, sibling ``order`` values dense from 0.
    Returned nodes are copies; the store stays the only owner of its nodes.
    Expected absence is reported as ``None``/``False``; a missing parent raises
    :class:`ParentNotFoundError`.
    """

    def __init__(self, store: MenuStore):
        self.store = store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_as_tree(self) -> List[MenuItem]:
        return build_forest(self.store.all())

    def get_by_id(self, menu_id: str) -> Optional[MenuNode]:
        node = self.store.get(menu_id)
        return node.model_copy() if node else None

    def get_with_children(self, menu_id: str) -> Optional[MenuItem]:
        node = self.store.get(menu_id)
        if node is None:
            return None
        children = build_forest(self.store.iter_descendants(menu_id), menu_id)
        return MenuItem(**node.model_dump(), children=children)

    def is_descendant(self, ancestor_id: str, candidate_id: Optional[str]) -> bool:
        """Return True when ``candidate_id`` lies somewhere below ``ancestor_id``."""
        seen = set()
        current = self.store.get(candidate_id)
        while current is not None and current.parent_id is not None:
            if current.parent_id == ancestor_id:
                return True
            if current.id in seen:
                logger.warning(f"Parent cycle detected at menu {current.id}")
                return False
            seen.add(current.id)
            current = self.store.get(current.parent_id)
        return False

    def would_create_cycle(self, menu_id: str, new_parent_id: Optional[str]) -> bool:
        if new_parent_id is None:
            return False
        return new_parent_id == menu_id or self.is_descendant(menu_id, new_parent_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, request: MenuItemCreate) -> MenuNode:
        parent_id = request.parent_id or None
        parent = None
        if parent_id is not None:
            parent = self.store.get(parent_id)
            if parent is None:
                raise ParentNotFoundError(parent_id)

        now = utc_now()
        node = MenuNode(
            id=self._new_id(),
            name=request.name,
            label=request.label,
            depth=parent.depth + 1 if parent else 1,
            order=len(self.store.child_ids(parent_id)),
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        self.store.add(node)
        logger.info(f"Created menu {node.id} ({node.name}) under {parent_id}")
        return node.model_copy()

    def update(self, menu_id: str, request: MenuItemUpdate) -> Optional[MenuNode]:
        """Apply a partial update; reparenting shifts the whole subtree's depth.

        The caller must have rejected a new parent that is the node itself or
        one of its descendants (see :meth:`would_create_cycle`).
        """
        node = self.store.get(menu_id)
        if node is None:
            return None

        new_parent_id = request.parent_id or None
        reparent = request.changes_parent and new_parent_id != node.parent_id
        new_parent = None
        if reparent and new_parent_id is not None:
            new_parent = self.store.get(new_parent_id)
            if new_parent is None:
                raise ParentNotFoundError(new_parent_id)

        if request.name is not None:
            node.name = request.name
        if request.label is not None:
            node.label = request.label
        if reparent:
            self._reparent(node, new_parent)
        node.updated_at = utc_now()
        return node.model_copy()

    def move(self, menu_id: str, parent_id: Optional[str]) -> Optional[MenuNode]:
        return self.update(menu_id, MenuItemUpdate(parent_id=parent_id))

    def delete(self, menu_id: str) -> bool:
        """Delete a node and its whole subtree. Surviving siblings keep their order."""
        if menu_id not in self.store:
            return False
        descendant_ids = [node.id for node in self.store.iter_descendants(menu_id)]
        # pre-order reversed: every node goes after all of its descendants
        for descendant_id in reversed(descendant_ids):
            self.store.remove(descendant_id)
        self.store.remove(menu_id)
        logger.info(f"Deleted menu {menu_id} and {len(descendant_ids)} descendant(s)")
        return True

    def reorder(self, menu_id: str, new_order: int) -> Optional[MenuNode]:
        """Move a node to ``new_order`` among its siblings and renumber them 0..k-1.

        Out-of-range positions are clamped. Only the moved node's
        ``updated_at`` changes.
        """
        node = self.store.get(menu_id)
        if node is None:
            return None

        siblings = sorted(
            (s for s in self.store.children_of(node.parent_id) if s.id != menu_id),
            key=_sibling_key,
        )
        position = min(max(new_order, 0), len(siblings))
        siblings.insert(position, node)
        for index, sibling in enumerate(siblings):
            sibling.order = index

        node.updated_at = utc_now()
        logger.info(f"Reordered menu {menu_id} to position {position}")
        return node.model_copy()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reparent(self, node: MenuNode, new_parent: Optional[MenuNode]) -> None:
        new_depth = new_parent.depth + 1 if new_parent else 1
        delta = new_depth - node.depth
        self.store.set_parent(node.id, new_parent.id if new_parent else None)
        node.depth = new_depth
        if delta:
            for descendant in self.store.iter_descendants(node.id):
                descendant.depth += delta
        logger.info(
            f"Moved menu {node.id} under {node.parent_id} (depth shift {delta:+d})"
        )

    def _new_id(self) -> str:
        new_id = str(uuid.uuid4())
        while new_id in self.store:
            new_id = str(uuid.uuid4())
        return new_id
