"""
Link Value Objects.

Describes a denormalized one-to-many relationship stored on both sides:
the "one" side keeps an ordered list of child ids (forward reference),
each child keeps the id of its single parent (back reference).
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


def ordered_unique(ids: Optional[Iterable[str]]) -> List[str]:
    """Drop empty and repeated ids, keeping first-seen order."""
    seen = set()
    result = []
    for item in ids or []:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


@dataclass(frozen=True)
class LinkSpec:
    """
    Collections and field names of a bidirectional relationship.

    Attributes:
        parent_collection: Collection holding the forward list
        child_collection: Collection holding the back reference
        forward_field: List field on the parent document
        back_field: Scalar field on the child document
    """
    parent_collection: str
    child_collection: str
    forward_field: str
    back_field: str


@dataclass(frozen=True)
class LinkDiff:
    """Children gained and lost between two forward lists."""
    to_link: Tuple[str, ...] = ()
    to_unlink: Tuple[str, ...] = ()

    @classmethod
    def between(cls, previous: Optional[Iterable[str]], new: Optional[Iterable[str]]) -> "LinkDiff":
        previous_ids = ordered_unique(previous)
        new_ids = ordered_unique(new)
        previous_set = set(previous_ids)
        new_set = set(new_ids)
        return cls(
            to_link=tuple(i for i in new_ids if i not in previous_set),
            to_unlink=tuple(i for i in previous_ids if i not in new_set),
        )

    @property
    def is_empty(self) -> bool:
        return not self.to_link and not self.to_unlink


MACHINE_AUXILIARY_LINK = LinkSpec(
    parent_collection="machines",
    child_collection="auxiliary_equipment",
    forward_field="linked_auxiliary_equipment_ids",
    back_field="linked_equipment_id",
)


__all__ = ["LinkSpec", "LinkDiff", "ordered_unique", "MACHINE_AUXILIARY_LINK"]
