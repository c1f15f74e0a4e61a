"""Group a session's flat message list into conversations."""

from .models import Conversation
from .session import extract_text


def group_conversations(session):
    """Split messages into conversations, one per user message.

    Each user message opens a new conversation and every following non-user
    message is appended to it. Messages before the first user message belong
    to no conversation and are dropped.

    Args:
        session: A parsed Session.

    Returns:
        List of Conversation objects in message order.
    """
    conversations = []
    current = None

    for message in session.messages:
        if message.role == "user":
            if current is not None:
                conversations.append(current)
            current = Conversation(
                user_text=extract_text(message),
                timestamp=message.timestamp,
                messages=[message],
                is_continuation=message.is_compact_summary,
            )
        elif current is not None:
            current.messages.append(message)

    if current is not None:
        conversations.append(current)

    return conversations
