from fastapi import APIRouter, Depends

from hrmaster.models.users import User
from hrmaster.routers.auth import get_current_user
from hrmaster.schemas.org import MessageCreate
from hrmaster.services.messaging_service import MessagingService

router = APIRouter(prefix="/messages", tags=["messages"])


def _message_out(m):
    return {
        "id": str(m.id),
        "sender_id": m.sender_id,
        "receiver_id": m.receiver_id,
        "content": m.content,
        "read": m.read,
        "created_at": m.created_at,
    }


@router.get("/unread-count")
async def unread_count(current_user: User = Depends(get_current_user)):
    return {"count": await MessagingService.unread_count(str(current_user.id))}


@router.get("/conversations")
async def conversations(current_user: User = Depends(get_current_user)):
    return {"conversations": await MessagingService.conversations(str(current_user.id))}


@router.get("/{other_id}")
async def thread(other_id: str, current_user: User = Depends(get_current_user)):
    messages = await MessagingService.thread(str(current_user.id), other_id)
    return {"messages": [_message_out(m) for m in messages]}


@router.post("/{receiver_id}", status_code=201)
async def send(receiver_id: str, data: MessageCreate, current_user: User = Depends(get_current_user)):
    message = await MessagingService.send(str(current_user.id), receiver_id, data.content)
    return {"message": _message_out(message)}


@router.put("/{sender_id}/read")
async def mark_read(sender_id: str, current_user: User = Depends(get_current_user)):
    await MessagingService.mark_read(str(current_user.id), sender_id)
    return {"message": "Messages marked as read"}
