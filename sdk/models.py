"""Pydantic data models for the subset of the Telegram Bot API Reactor consumes.

Every entity is frozen after construction.  Unknown payload fields are
ignored, so newer API additions never break decoding.  Message
cross-references (``reply_to_message``, ``forward_from``) are nested value
copies rather than shared references.
"""

from __future__ import annotations

from typing import Any, ClassVar, List, Optional

from pydantic import BaseModel, Field

_FROZEN = {"populate_by_name": True, "frozen": True}


class Envelope(BaseModel):
    """Top-level ``{"ok": ..., "result": ...}`` wrapper of every API response."""

    ok: bool
    result: Optional[Any] = None
    error_code: Optional[int] = None
    description: Optional[str] = None

    model_config = _FROZEN


class User(BaseModel):
    """This object represents a Telegram user or bot."""

    id: int
    is_bot: bool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None

    model_config = _FROZEN


class Chat(BaseModel):
    """This object represents a chat."""

    id: int
    type: str
    title: Optional[str] = None
    user_name: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = _FROZEN


class MessageEntity(BaseModel):
    """A tagged sub-range of a message's text, e.g. a bot command or a URL."""

    BOT_COMMAND: ClassVar[str] = "bot_command"

    type: str
    offset: int
    length: int
    user: Optional[User] = None
    url: Optional[str] = None

    model_config = _FROZEN

    @property
    def is_bot_command(self) -> bool:
        return self.type == self.BOT_COMMAND


class PhotoSize(BaseModel):
    """One size of a photo or a file / sticker thumbnail."""

    file_id: str
    width: int
    height: int
    file_size: Optional[int] = None

    model_config = _FROZEN


class Sticker(BaseModel):
    """This object represents a sticker."""

    file_id: str
    width: int
    height: int
    is_animated: bool = False
    emoji: Optional[str] = None
    set_name: Optional[str] = None

    model_config = _FROZEN


class Video(BaseModel):
    """This object represents a video file."""

    file_id: str
    width: int
    height: int
    duration: int
    thumb: Optional[PhotoSize] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = _FROZEN


class Message(BaseModel):
    """This object represents a message."""

    message_id: int
    date: int
    chat: Chat
    from_field: Optional[User] = Field(None, alias="from")
    forward_from: Optional[User] = None
    reply_to_message: Optional[Message] = None
    edit_date: Optional[int] = None
    text: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    sticker: Optional[Sticker] = None
    video: Optional[Video] = None
    photo: Optional[List[PhotoSize]] = None
    caption: Optional[str] = None
    new_chat_members: Optional[List[User]] = None
    left_chat_member: Optional[User] = None
    new_chat_title: Optional[str] = None

    model_config = _FROZEN


class ChatMember(BaseModel):
    """Information about one member of a chat."""

    user: User
    status: str
    until_date: Optional[int] = None
    can_be_edited: Optional[bool] = None
    can_post_messages: Optional[bool] = None
    can_edit_messages: Optional[bool] = None
    can_delete_messages: Optional[bool] = None
    can_restrict_members: Optional[bool] = None
    can_promote_members: Optional[bool] = None
    can_change_info: Optional[bool] = None
    can_invite_users: Optional[bool] = None
    can_pin_messages: Optional[bool] = None
    is_member: Optional[bool] = None
    can_send_messages: Optional[bool] = None
    can_send_media_messages: Optional[bool] = None
    can_send_polls: Optional[bool] = None
    can_send_other_messages: Optional[bool] = None
    can_add_web_page_previews: Optional[bool] = None

    model_config = _FROZEN


class Update(BaseModel):
    """An incoming update.  At most one of the optional payloads is present."""

    update_id: int
    message: Optional[Message] = None
    edited_message: Optional[Message] = None

    model_config = _FROZEN


class BotCommand(BaseModel):
    """A bot command found in a message.  Derived locally, never transmitted.

    ``offset`` and ``length`` are copied verbatim from the originating
    :class:`MessageEntity`.
    """

    command: str
    offset: int
    length: int

    model_config = _FROZEN
