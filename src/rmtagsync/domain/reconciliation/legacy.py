"""Best-effort repairs for tags written before identities were tracked.

Both passes are idempotent. A tag that cannot be tied to a source person is
logged and left untouched; legacy repair never deletes anything.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rmtagsync.domain.errors import ConstraintError, QueryError
from rmtagsync.domain.labels import KNOWN_LABEL_VERSIONS, format_person, is_current_person_label
from rmtagsync.domain.model import FAMILY_PROPERTY, IDENTITY_PROPERTY, PERSON_PROPERTY

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Set

    from rmtagsync.domain.model import OwnerId, PersonRecord, TagNode
    from rmtagsync.domain.ports.store import TagStore

log = logging.getLogger(__name__)


def legacy_label_lookup(people: Iterable[PersonRecord]) -> dict[str, PersonRecord]:
    """Map every known label shape to its person, dropping ambiguous labels."""

    lookup: dict[str, PersonRecord] = {}
    ambiguous: set[str] = set()
    for person in people:
        for version in KNOWN_LABEL_VERSIONS:
            label = format_person(person, version=version)
            holder = lookup.get(label)
            if holder is not None and holder.owner_id != person.owner_id:
                ambiguous.add(label)
            lookup[label] = person
    for label in ambiguous:
        log.warning("Label %r matches several people; legacy tags with it stay unbound", label)
        del lookup[label]
    return lookup


def bind_legacy_nodes(
    store: TagStore,
    root_id: int,
    people: Iterable[PersonRecord],
    *,
    tracked: Set[OwnerId] = frozenset(),
) -> int:
    """Attach identities to untracked person tags directly under ``root_id``.

    Family group tags are skipped, and so are people already in ``tracked`` or
    bound earlier in the pass. Returns the number of tags bound.
    """

    lookup = legacy_label_lookup(people)
    taken = set(tracked)
    bound = 0
    for tag_id in store.list_children(root_id):
        try:
            if store.get_property(tag_id, IDENTITY_PROPERTY) is not None:
                continue
            if store.get_property(tag_id, FAMILY_PROPERTY) is not None:
                continue
            row = store.get_node(tag_id)
            if row is None:
                continue
            person = lookup.get(row.name)
            if person is None:
                log.warning(
                    "No person matches legacy tag %r (TagID: %s); leaving it", row.name, tag_id
                )
                continue
            if person.owner_id in taken:
                log.warning(
                    "OwnerID %s already has a tag; leaving legacy tag %r (TagID: %s)",
                    person.owner_id,
                    row.name,
                    tag_id,
                )
                continue
            store.set_property(tag_id, IDENTITY_PROPERTY, str(person.owner_id))
            if store.get_property(tag_id, PERSON_PROPERTY) is None:
                store.set_property(tag_id, PERSON_PROPERTY, row.name)
        except QueryError as exc:
            log.warning("Could not bind legacy tag %s: %s", tag_id, exc)
            continue
        taken.add(person.owner_id)
        bound += 1
        log.info("Bound legacy tag %r to OwnerID %s", row.name, person.owner_id)
    if bound:
        log.info("Bound %s legacy tags", bound)
    return bound


def repair_label_format(
    store: TagStore,
    index: Mapping[OwnerId, TagNode],
    people_by_id: Mapping[OwnerId, PersonRecord],
) -> int:
    """Rename indexed tags whose name predates the current label format."""

    repaired = 0
    for owner_id, node in index.items():
        if is_current_person_label(node.name, owner_id):
            continue
        person = people_by_id.get(owner_id)
        if person is None:
            log.warning(
                "No person with OwnerID %s for tag %r; leaving its name", owner_id, node.name
            )
            continue
        label = person.label
        try:
            store.rename_node(node.tag_id, label)
            store.set_property(node.tag_id, PERSON_PROPERTY, label)
        except (QueryError, ConstraintError) as exc:
            log.warning("Could not repair label of tag %r: %s", node.name, exc)
            continue
        repaired += 1
        log.info("Repaired label: %r -> %r", node.name, label)
    if repaired:
        log.info("Repaired %s tag labels", repaired)
    return repaired
