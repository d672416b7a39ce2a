"""
Shared route dependencies.
"""
from fastapi import Header, HTTPException, status
from splitledger.db.session import GroupStore
from splitledger.models.group import Group
from splitledger.models.member import MemberId


async def get_current_member(x_user_id: str = Header(default="")) -> MemberId:
    """
    Identity of the caller.

    Requests arrive already authenticated; the gateway forwards the user id
    in the X-User-Id header.
    """
    if not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity"
        )
    return MemberId(x_user_id.strip())


def check_group_access(group_id: str, member_id: MemberId, store: GroupStore) -> Group:
    """Load a group and check the caller belongs to it."""
    group = store.get(group_id)
    if not group.is_member(member_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this group"
        )
    return group


def check_group_admin(group_id: str, member_id: MemberId, store: GroupStore) -> Group:
    """Load a group and check the caller is one of its admins."""
    group = check_group_access(group_id, member_id, store)
    if not group.is_admin(member_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only group admins can do this"
        )
    return group
