"""Family group tags sitting between the primary root and person tags."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rmtagsync.domain.model import FAMILY_PROPERTY

if TYPE_CHECKING:
    from rmtagsync.domain.model import FamilyRecord
    from rmtagsync.domain.ports.store import TagStore

log = logging.getLogger(__name__)


class FamilyGroups:
    """Find-or-create family group tags, caching the tag id per family."""

    def __init__(self, store: TagStore, primary_root_id: int) -> None:
        self._store = store
        self._primary_root_id = primary_root_id
        self._group_ids: dict[int, int] = {}
        self.created = 0

    def ensure(self, family: FamilyRecord) -> int:
        cached = self._group_ids.get(family.family_id)
        if cached is not None:
            return cached

        label = family.label
        group_id = self._store.find_node_by_name(label, parent_id=self._primary_root_id)
        if group_id is None:
            group_id = self._store.create_node(label, self._primary_root_id)
            self.created += 1
            log.info("Created family group: %s", label)
        if self._store.get_property(group_id, FAMILY_PROPERTY) is None:
            self._store.set_property(group_id, FAMILY_PROPERTY, str(family.family_id))

        self._group_ids[family.family_id] = group_id
        return group_id
