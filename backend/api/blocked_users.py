from fastapi import APIRouter, Depends, Query, status

from client_ip import get_client_ip
from schemas import (
    BanStatusResponse,
    BlockedUserCreate,
    BlockedUserListResponse,
    BlockedUserResult,
    MessageResponse,
)
from services import blocklist_service

router = APIRouter(prefix="/api", tags=["blocklist"])


@router.post(
    "/admin/blocked-users",
    response_model=BlockedUserResult,
    status_code=status.HTTP_201_CREATED,
)
async def block_user(payload: BlockedUserCreate) -> BlockedUserResult:
    row = await blocklist_service.block_identifier(payload.identifier, payload.note)
    return BlockedUserResult(entry=row)


@router.get("/admin/blocked-users", response_model=BlockedUserListResponse)
async def list_blocked_users() -> BlockedUserListResponse:
    items = await blocklist_service.list_blocked_users()
    return BlockedUserListResponse(items=items)


@router.delete("/admin/blocked-users/{identifier}", response_model=MessageResponse)
async def unblock_user(identifier: str) -> MessageResponse:
    await blocklist_service.unblock_identifier(identifier)
    return MessageResponse(message="Identifier unblocked")


@router.get("/check-ban-status", response_model=BanStatusResponse)
async def check_ban_status(
    ip: str | None = Query(default=None),
    device_id: str | None = Query(default=None),
    phone: str | None = Query(default=None),
    client_ip: str | None = Depends(get_client_ip),
) -> BanStatusResponse:
    banned = await blocklist_service.is_banned([ip or client_ip, device_id, phone])
    return BanStatusResponse(banned=banned)
