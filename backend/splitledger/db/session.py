"""
Group storage.

An in-memory store of Group aggregates. Each aggregate carries a version;
saving compares it with the stored one, so a writer that loaded a stale copy
fails instead of silently overwriting someone else's change.
"""
import logging
import threading
from typing import Dict, List, Set

from splitledger.core.errors import ConcurrentModification, GroupNotFound
from splitledger.models.group import Group
from splitledger.models.member import MemberId

logger = logging.getLogger(__name__)


class GroupStore:
    """Versioned in-memory store for Group aggregates."""

    def __init__(self):
        self._groups: Dict[str, Group] = {}
        self._lock = threading.Lock()

    def get(self, group_id: str) -> Group:
        group = self._groups.get(group_id)
        if group is None:
            raise GroupNotFound("Group not found")
        return group

    def get_by_join_key(self, join_key: str) -> Group:
        for group in self._groups.values():
            if group.join_key == join_key:
                return group
        raise GroupNotFound("Group not found")

    def join_keys(self) -> Set[str]:
        return {group.join_key for group in self._groups.values()}

    def list_for_member(self, member_id: MemberId) -> List[Group]:
        return [group for group in self._groups.values() if group.is_member(member_id)]

    def save(self, group: Group) -> Group:
        """Store group if its version matches the stored one. Returns the saved copy."""
        with self._lock:
            current = self._groups.get(group.id)
            expected = current.version if current is not None else 0
            if group.version != expected:
                logger.warning(
                    f"Rejected save of group {group.id}: version {group.version}, stored {expected}"
                )
                raise ConcurrentModification(
                    "Group was modified by another request. Reload and try again."
                )
            saved = group.model_copy(update={"version": group.version + 1})
            self._groups[group.id] = saved
            return saved

    def delete(self, group_id: str) -> None:
        with self._lock:
            if self._groups.pop(group_id, None) is None:
                raise GroupNotFound("Group not found")

    def clear(self) -> None:
        with self._lock:
            self._groups.clear()


store = GroupStore()


def get_store() -> GroupStore:
    """Dependency for getting the group store."""
    return store
