"""
Group management routes.
"""
from fastapi import APIRouter, Depends, status
from typing import List
from splitledger.core.config import settings
from splitledger.db.session import GroupStore, get_store
from splitledger.models.member import MemberId
from splitledger.schemas.group import GroupCreate, GroupJoin, GroupResponse, GroupUpdate, MemberAdd, MemberRoleUpdate
from splitledger.services import group_service
from splitledger.api.dependencies import check_group_access, check_group_admin, get_current_member

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Get all groups the caller belongs to."""
    groups = sorted(store.list_for_member(current_member), key=lambda g: g.created_at, reverse=True)
    return [GroupResponse.model_validate(group) for group in groups]


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Create a new group with the caller as admin."""
    group = group_service.create_group(
        name=group_data.name,
        creator_id=current_member,
        creator_name=group_data.creator_name,
        creator_email=group_data.creator_email,
        description=group_data.description,
        currency=group_data.currency or settings.DEFAULT_CURRENCY,
        join_key=group_service.generate_join_key(store.join_keys()),
    )
    return GroupResponse.model_validate(store.save(group))


@router.post("/join", response_model=GroupResponse)
async def join_group(
    join_data: GroupJoin,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Join a group using its 6-character join key."""
    group = store.get_by_join_key(group_service.normalize_join_key(join_data.join_key))
    group = group_service.join_group(group, current_member, name=join_data.name, email=join_data.email)
    return GroupResponse.model_validate(store.save(group))


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Get group details."""
    group = check_group_access(group_id, current_member, store)
    return GroupResponse.model_validate(group)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Update group name, description or currency (admin only)."""
    group = check_group_admin(group_id, current_member, store)
    group = group_service.update_group(
        group,
        name=group_data.name,
        description=group_data.description,
        currency=group_data.currency,
    )
    return GroupResponse.model_validate(store.save(group))


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    group_id: str,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Delete a group permanently (admin only)."""
    check_group_admin(group_id, current_member, store)
    store.delete(group_id)


@router.post("/{group_id}/members", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    group_id: str,
    member_data: MemberAdd,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Add a member to the group (admin only)."""
    group = check_group_admin(group_id, current_member, store)
    group = group_service.add_member(
        group,
        member_data.member_id,
        name=member_data.name,
        email=member_data.email,
        role=member_data.role,
    )
    return GroupResponse.model_validate(store.save(group))


@router.delete("/{group_id}/members/{member_id}", response_model=GroupResponse)
async def remove_member(
    group_id: str,
    member_id: str,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Remove a member from the group (admin only)."""
    group = check_group_admin(group_id, current_member, store)
    group = group_service.remove_member(group, MemberId(member_id))
    return GroupResponse.model_validate(store.save(group))


@router.put("/{group_id}/members/{member_id}/role", response_model=GroupResponse)
async def change_member_role(
    group_id: str,
    member_id: str,
    role_data: MemberRoleUpdate,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Change a member's role (admin only)."""
    group = check_group_admin(group_id, current_member, store)
    group = group_service.change_role(group, MemberId(member_id), role_data.role)
    return GroupResponse.model_validate(store.save(group))
