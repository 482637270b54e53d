"""Tests for update classification and bot-command extraction."""

import sys
import os
from typing import List
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bot.dispatcher import command_text, dispatch_updates, extract_bot_commands, process_update
from bot.processor import MessageProcessor
from bot.server import BotServer
from core.engine import PollEngine
from sdk.client import HttpClient
from sdk.models import BotCommand, Chat, Message, MessageEntity, Update, User

CHAT = Chat(id=1000, type="private")
SENDER = User(id=42, is_bot=False, first_name="Ada")


def _make_message(text: str | None, entities: List[MessageEntity] | None = None, message_id: int = 1) -> Message:
    return Message(message_id=message_id, date=0, chat=CHAT, from_field=SENDER, text=text, entities=entities)


def _command_entity(offset: int, length: int) -> MessageEntity:
    return MessageEntity(type="bot_command", offset=offset, length=length)


class RecordingProcessor(MessageProcessor):
    """Processor that records every callback it receives."""

    def __init__(self) -> None:
        self.calls: list = []

    def on_message(self, message, server) -> None:
        self.calls.append(("message", message.message_id))

    def on_bot_commands(self, message, commands, server) -> None:
        self.calls.append(("commands", message.message_id, list(commands)))

    def on_message_edited(self, message, server) -> None:
        self.calls.append(("edited", message.message_id))


class PlainProcessor(MessageProcessor):
    """Processor relying on the default on_message_edited."""

    def on_message(self, message, server) -> None:
        pass

    def on_bot_commands(self, message, commands, server) -> None:
        pass


# ── command_text ─────────────────────────────────────────────────────────────


class TestCommandText:
    """Literal offset-to-length scan, truncated at '@'."""

    def test_offset_one_length_five(self) -> None:
        assert command_text("/cmd@bot extra", _command_entity(1, 5)) == "cmd"

    def test_whole_command(self) -> None:
        assert command_text("/abc", _command_entity(0, 4)) == "/abc"

    def test_bot_username_suffix_stripped(self) -> None:
        assert command_text("/status@reactor_bot", _command_entity(0, 19)) == "/status"

    def test_command_not_at_start_uses_length_as_end(self) -> None:
        # "hi /go": entity offset 3, length 3 → range [3, 3) is empty.
        assert command_text("hi /go", _command_entity(3, 3)) == ""

    def test_length_past_end_of_text(self) -> None:
        assert command_text("/go", _command_entity(0, 10)) == "/go"

    def test_leading_at_sign(self) -> None:
        assert command_text("@bot", _command_entity(0, 4)) == ""


# ── extract_bot_commands ─────────────────────────────────────────────────────


class TestExtractBotCommands:
    def test_no_entities(self) -> None:
        assert extract_bot_commands(_make_message("hello")) == []

    def test_non_command_entities_ignored(self) -> None:
        msg = _make_message("see https://x.io", [MessageEntity(type="url", offset=4, length=12)])
        assert extract_bot_commands(msg) == []

    def test_every_command_in_order(self) -> None:
        msg = _make_message("/a /bb", [
            _command_entity(0, 2),
            MessageEntity(type="bold", offset=0, length=1),
            _command_entity(3, 6),
        ])
        commands = extract_bot_commands(msg)
        assert commands == [
            BotCommand(command="/a", offset=0, length=2),
            BotCommand(command="/bb", offset=3, length=6),
        ]

    def test_missing_text(self) -> None:
        msg = _make_message(None, [_command_entity(0, 4)])
        assert extract_bot_commands(msg) == [BotCommand(command="", offset=0, length=4)]


# ── process_update / dispatch_updates ────────────────────────────────────────


class TestProcessUpdate:
    """Routing rules between the three processor callbacks."""

    @pytest.fixture()
    def server(self) -> MagicMock:
        return MagicMock(spec=BotServer)

    def test_plain_message(self, server) -> None:
        proc = RecordingProcessor()
        process_update(proc, Update(update_id=1, message=_make_message("hello")), server)
        assert proc.calls == [("message", 1)]

    def test_message_with_url_only_is_plain(self, server) -> None:
        proc = RecordingProcessor()
        msg = _make_message("https://x.io", [MessageEntity(type="url", offset=0, length=12)])
        process_update(proc, Update(update_id=1, message=msg), server)
        assert proc.calls == [("message", 1)]

    def test_command_replaces_plain_callback(self, server) -> None:
        proc = RecordingProcessor()
        msg = _make_message("/abc", [_command_entity(0, 4)])
        process_update(proc, Update(update_id=10, message=msg), server)
        assert proc.calls == [("commands", 1, [BotCommand(command="/abc", offset=0, length=4)])]

    def test_edited_message(self, server) -> None:
        proc = RecordingProcessor()
        process_update(proc, Update(update_id=2, edited_message=_make_message("fixed", message_id=5)), server)
        assert proc.calls == [("edited", 5)]

    def test_default_edited_callback_is_noop(self, server) -> None:
        process_update(PlainProcessor(), Update(update_id=2, edited_message=_make_message("x")), server)
        assert server.method_calls == []

    def test_empty_update_ignored(self, server) -> None:
        proc = RecordingProcessor()
        process_update(proc, Update(update_id=3), server)
        assert proc.calls == []

    def test_server_handle_passed_through(self, server) -> None:
        proc = MagicMock(spec=MessageProcessor)
        msg = _make_message("hello")
        process_update(proc, Update(update_id=1, message=msg), server)
        proc.on_message.assert_called_once_with(msg, server)

    def test_batch_order(self, server) -> None:
        proc = RecordingProcessor()
        dispatch_updates(proc, [
            Update(update_id=1, message=_make_message("one", message_id=11)),
            Update(update_id=2, edited_message=_make_message("two", message_id=12)),
            Update(update_id=3, message=_make_message("/x", [_command_entity(0, 2)], message_id=13)),
        ], server)
        assert [call[:2] for call in proc.calls] == [("message", 11), ("edited", 12), ("commands", 13)]


# ── End to end ───────────────────────────────────────────────────────────────


class TestEndToEnd:
    """Engine + server + dispatcher over a fake transport."""

    def test_single_command_update(self) -> None:
        transport = MagicMock(spec=HttpClient)
        transport.fetch.return_value = {"ok": True, "result": [{
            "update_id": 10,
            "message": {
                "message_id": 1,
                "date": 0,
                "chat": {"id": 1000, "type": "private"},
                "from": {"id": 42, "is_bot": False, "first_name": "Ada"},
                "text": "/abc",
                "entities": [{"type": "bot_command", "offset": 0, "length": 4}],
            },
        }]}
        proc = RecordingProcessor()
        engine = PollEngine(transport)
        server = BotServer(engine, proc)
        engine._on_updates = server.on_updates

        engine.run_cycle()

        assert engine.cursor == 11
        assert proc.calls == [("commands", 1, [BotCommand(command="/abc", offset=0, length=4)])]
