"""
Contact Inbox Service
Stores contact form submissions for the admin to read and clear.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select

from restaurant_api.core.errors import ValidationError
from restaurant_api.database import Database
from restaurant_api.models import ContactMessage

logger = logging.getLogger(__name__)


def _required(value: Optional[str], label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


class ContactInbox:
    """Contact messages. Unrelated to user accounts."""

    def __init__(self, database: Database):
        self.db = database

    async def submit(
        self,
        name: Optional[str],
        email: Optional[str],
        message: Optional[str],
        phone: Optional[str] = None,
    ) -> int:
        """
        Store a message.

        Raises:
            ValidationError: name, email or message missing or blank
        """
        entry = ContactMessage(
            name=_required(name, "Name"),
            email=_required(email, "Email"),
            message=_required(message, "Message"),
            phone=(phone or "").strip() or None,
        )

        async with self.db.session() as session:
            session.add(entry)
            await session.commit()

        logger.info(f"Contact message #{entry.id} received from {entry.email}")
        return entry.id

    async def list_messages(self) -> list[ContactMessage]:
        """All messages, newest first."""
        async with self.db.session() as session:
            result = await session.execute(
                select(ContactMessage).order_by(
                    ContactMessage.created_at.desc(), ContactMessage.id.desc()
                )
            )
            return list(result.scalars().all())

    async def delete(self, message_id: int) -> None:
        """Delete a message. Unknown ids are ignored."""
        async with self.db.session() as session:
            result = await session.execute(
                delete(ContactMessage).where(ContactMessage.id == message_id)
            )
            await session.commit()

        if result.rowcount:
            logger.info(f"Contact message #{message_id} deleted")
