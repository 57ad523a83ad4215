from campus_qa.models.user import User
from campus_qa.models.chat import Chat, Message

__all__ = [
    "User",
    "Chat",
    "Message",
]
