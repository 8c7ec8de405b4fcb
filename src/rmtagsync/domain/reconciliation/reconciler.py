"""Reconciler: apply per-person decisions to the tag store.

Two passes run over the source people. The matched pass handles everyone the
primary branch already tracks (rename, regroup) so that family groups it creates
are in place before the create/rescue pass places new people.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rmtagsync.domain.errors import ConstraintError, ReconciliationFailure
from rmtagsync.domain.model import IDENTITY_PROPERTY, PERSON_ICON, PERSON_PROPERTY

from .contracts import PersonState, ReconciliationResult
from .decide import needs_regroup, needs_rename, plan_person, resolve_family
from .families import FamilyGroups

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from rmtagsync.domain.model import BranchRoots, FamilyRecord, OwnerId, PersonRecord, TagNode
    from rmtagsync.domain.ports.store import TagStore

log = logging.getLogger(__name__)


class Reconciler:
    """Bring person tags in line with the source and track which tags are claimed."""

    def __init__(
        self,
        store: TagStore,
        roots: BranchRoots,
        families: Mapping[int, FamilyRecord],
        catch_all_index: Mapping[OwnerId, TagNode],
        *,
        result: ReconciliationResult | None = None,
    ) -> None:
        self.store = store
        self.roots = roots
        self.families = families
        self.catch_all_index = catch_all_index
        self.result = result if result is not None else ReconciliationResult()
        self.groups = FamilyGroups(store, roots.primary_id)
        self.claimed: set[int] = set()

    def run(
        self,
        people: Iterable[PersonRecord],
        primary_index: Mapping[OwnerId, TagNode],
    ) -> ReconciliationResult:
        pending: list[PersonRecord] = []
        for person in people:
            if plan_person(person, primary_index) is PersonState.MATCHED:
                self.apply_matched(person, primary_index[person.owner_id])
            else:
                self.result.record(person.owner_id, PersonState.UNSEEN)
                pending.append(person)

        for person in pending:
            self.create_or_rescue(person)

        self.result.family_groups_created += self.groups.created
        return self.result

    # Matched pass ---------------------------------------------------------

    def apply_matched(self, person: PersonRecord, node: TagNode) -> None:
        self.claimed.add(node.tag_id)
        label = person.label
        if needs_rename(node, label):
            try:
                self._rename(node.tag_id, label)
            except ConstraintError as exc:
                self._fail(person, str(exc))
                return
            self.result.updated += 1
            log.info("Updated: %r -> %r (OwnerID: %s)", node.name, label, person.owner_id)

        family = resolve_family(person, self.families)
        if family is not None and needs_regroup(node, family, self.roots.primary_id):
            group_id = self.groups.ensure(family)
            try:
                self.store.reparent_node(node.tag_id, group_id)
            except ConstraintError as exc:
                log.warning("Could not move %r into its family group: %s", label, exc)
            else:
                self.result.regrouped += 1
                log.info("Grouped: %r under %r", label, family.label)

        self.result.record(person.owner_id, PersonState.MATCHED)

    # Create / rescue pass -------------------------------------------------

    def target_parent(self, person: PersonRecord) -> int:
        family = resolve_family(person, self.families)
        if family is None:
            return self.roots.primary_id
        return self.groups.ensure(family)

    def create_or_rescue(self, person: PersonRecord) -> None:
        parent_id = self.target_parent(person)
        try:
            tag_id, created = self.create_person_node(person, parent_id)
        except ConstraintError as exc:
            log.debug("Create blocked for OwnerID %s: %s", person.owner_id, exc)
            self.rescue(person, parent_id)
            return

        self.claimed.add(tag_id)
        if created:
            self.result.created += 1
            self.result.record(person.owner_id, PersonState.CREATED)
            log.info("Created: %s", person.label)
        else:
            self.result.record(person.owner_id, PersonState.MATCHED)

    def create_person_node(self, person: PersonRecord, parent_id: int) -> tuple[int, bool]:
        """Create the tag for ``person`` under ``parent_id``.

        Returns ``(tag_id, created)``. An existing tag with the same name, parent
        and identity is reused without writing. Raises ``ConstraintError`` when the
        catch-all branch holds the identity or the name is taken under the parent.
        """

        label = person.label
        owner = str(person.owner_id)
        existing = self.store.find_node_by_name(label, parent_id=parent_id)
        if existing is not None and self.store.get_property(existing, IDENTITY_PROPERTY) == owner:
            return existing, False

        held = self.store.list_children_with_property(
            self.roots.catch_all_id, IDENTITY_PROPERTY, value=owner
        )
        if held:
            raise ConstraintError(
                f"OwnerID {owner} is held by the catch-all branch (TagID: {held[0]})"
            )

        tag_id = self.store.create_node(label, parent_id, icon=PERSON_ICON)
        self.store.set_property(tag_id, IDENTITY_PROPERTY, owner)
        self.store.set_property(tag_id, PERSON_PROPERTY, label)
        return tag_id, True

    def rescue(self, person: PersonRecord, parent_id: int) -> None:
        node = self.catch_all_index.get(person.owner_id)
        if node is None:
            self._fail(person, "no tag with this identity in the catch-all branch")
            return
        current = self.store.get_node(node.tag_id)
        if current is None or current.parent_id != self.roots.catch_all_id:
            self._fail(person, f"catch-all tag {node.tag_id} is no longer in the catch-all branch")
            return

        label = person.label
        log.info("Rescuing from catch-all: %r (OwnerID: %s)", node.name, person.owner_id)
        try:
            self.store.reparent_node(node.tag_id, parent_id)
            if needs_rename(node, label):
                self._rename(node.tag_id, label)
                log.info("Updated rescued tag name: %r -> %r", node.name, label)
        except ConstraintError as exc:
            self._fail(person, str(exc))
            return

        if self.store.get_property(node.tag_id, IDENTITY_PROPERTY) is None:
            self.store.set_property(node.tag_id, IDENTITY_PROPERTY, str(person.owner_id))
        if self.store.get_property(node.tag_id, PERSON_PROPERTY) is None:
            self.store.set_property(node.tag_id, PERSON_PROPERTY, label)

        self.claimed.add(node.tag_id)
        self.result.rescued += 1
        self.result.record(person.owner_id, PersonState.RESCUED)
        log.info("Rescued: %s", label)

    # Helpers --------------------------------------------------------------

    def _rename(self, tag_id: int, label: str) -> None:
        self.store.rename_node(tag_id, label)
        self.store.set_property(tag_id, PERSON_PROPERTY, label)

    def _fail(self, person: PersonRecord, reason: str) -> None:
        failure = ReconciliationFailure(person.owner_id, person.label, reason)
        log.error("%s", failure)
        self.result.failed += 1
        self.result.record(person.owner_id, PersonState.FAILED)
