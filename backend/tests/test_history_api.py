"""Tests for the chat history endpoints."""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from campus_qa.models.chat import Chat, Message
from campus_qa.models.user import User

BASE = datetime(2026, 5, 1, 9, 0, 0)


def _seed(run_db):
    async def seed(session):
        alice = User(email="alice@example.edu.vn", is_verified=True)
        bob = User(email="bob@example.edu.vn", is_verified=True)
        session.add_all([alice, bob])
        await session.flush()

        older = Chat(user_id=alice.id, title="Học phí", created_at=BASE)
        newer = Chat(user_id=alice.id, title="Ký túc xá", created_at=BASE + timedelta(days=1))
        other = Chat(user_id=bob.id, title="Thư viện", created_at=BASE)
        session.add_all([older, newer, other])
        await session.flush()

        session.add_all([
            Message(chat_id=older.id, role="bot", content="12 triệu.", created_at=BASE + timedelta(minutes=1)),
            Message(chat_id=older.id, role="user", content="Học phí?", created_at=BASE),
            Message(chat_id=other.id, role="user", content="Giờ mở cửa?", created_at=BASE),
        ])
        await session.commit()
        return {"alice": alice.id, "older": older.id, "newer": newer.id}

    return run_db(seed)


def test_chats_without_user_id_is_empty(client):
    response = client.get("/api/chats")

    assert response.status_code == 200
    assert response.json() == []


def test_chats_with_invalid_user_id_is_empty(client):
    assert client.get("/api/chats", params={"userId": "abc"}).json() == []
    assert client.get("/api/chats", params={"userId": ""}).json() == []


@pytest.mark.parametrize("value", ["²", "٣", "１２"])
def test_non_ascii_digit_ids_are_empty(client, value):
    chats = client.get("/api/chats", params={"userId": value})
    messages = client.get("/api/messages", params={"chatId": value})

    assert chats.status_code == 200
    assert chats.json() == []
    assert messages.status_code == 200
    assert messages.json() == []


def test_chats_newest_first_for_user(client, run_db):
    ids = _seed(run_db)

    response = client.get("/api/chats", params={"userId": ids["alice"]})

    assert response.status_code == 200
    chats = response.json()
    assert [c["id"] for c in chats] == [ids["newer"], ids["older"]]
    assert chats[0]["title"] == "Ký túc xá"
    assert all(c["user_id"] == ids["alice"] for c in chats)


def test_messages_without_chat_id_is_empty(client):
    response = client.get("/api/messages")

    assert response.status_code == 200
    assert response.json() == []


def test_messages_oldest_first(client, run_db):
    ids = _seed(run_db)

    response = client.get("/api/messages", params={"chatId": ids["older"]})

    assert response.status_code == 200
    messages = response.json()
    assert [m["content"] for m in messages] == ["Học phí?", "12 triệu."]
    assert [m["role"] for m in messages] == ["user", "bot"]


def test_messages_for_unknown_chat_is_empty(client, run_db):
    _seed(run_db)
    assert client.get("/api/messages", params={"chatId": 9999}).json() == []


def test_chats_store_failure_returns_empty_list(client):
    with patch(
        "sqlalchemy.ext.asyncio.AsyncSession.execute",
        side_effect=RuntimeError("database down"),
    ):
        response = client.get("/api/chats", params={"userId": 1})

    assert response.status_code == 500
    assert response.json() == []
