"""
Message Routes

POST /messages - Send a direct message
GET /messages/conversations - Conversation partners with the latest message
GET /messages/unread - Unread message count
GET /messages/{other_user_id} - Thread with another user (marks it read)
PUT /messages/read/{sender_id} - Mark messages from a sender as read
"""

from fastapi import APIRouter, HTTPException, Depends
from typing import List

from app.core.auth import get_current_user
from app.services.mongo_service import MessageService, UserService
from app.schemas.schemas import (
    ChatMessageCreate, ChatMessageResponse, ConversationResponse,
    UnreadCountResponse, MessageResponse
)

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("", response_model=ChatMessageResponse, status_code=201)
async def send_message(data: ChatMessageCreate, user: dict = Depends(get_current_user)):
    """Send a message to another account."""
    if not UserService().get_by_id(data.recipient_id):
        raise HTTPException(status_code=404, detail="Recipient not found")

    message = MessageService().insert(user["id"], data.recipient_id, data.content)
    return ChatMessageResponse(**message)


@router.get("/conversations", response_model=List[ConversationResponse])
async def get_conversations(user: dict = Depends(get_current_user)):
    """One entry per conversation partner, most recent first."""
    rows = MessageService().get_conversations(user["id"])
    partners = UserService().get_many([row["partner_id"] for row in rows])

    conversations = []
    for row in rows:
        partner = partners.get(row["partner_id"])
        if not partner:
            # Partner account was deleted
            continue
        last = row["last_message"]
        conversations.append({
            "user": partner,
            "last_message": {
                "content": last["content"],
                "created_at": last.get("created_at"),
                "read": last.get("read", False),
                "sender": last["sender"],
            },
        })
    return conversations


@router.get("/unread", response_model=UnreadCountResponse)
async def get_unread_count(user: dict = Depends(get_current_user)):
    return UnreadCountResponse(count=MessageService().count_unread(user["id"]))


@router.get("/{other_user_id}", response_model=List[ChatMessageResponse])
async def get_thread(other_user_id: str, user: dict = Depends(get_current_user)):
    """Messages with another user, oldest first. Received messages become read."""
    messages = MessageService()
    thread = messages.get_thread(user["id"], other_user_id)
    messages.mark_read(other_user_id, user["id"])
    return thread


@router.put("/read/{sender_id}", response_model=MessageResponse)
async def mark_as_read(sender_id: str, user: dict = Depends(get_current_user)):
    count = MessageService().mark_read(sender_id, user["id"])
    return MessageResponse(message=f"{count} messages marked as read")
