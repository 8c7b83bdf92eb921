"""Channel ports for patient notifications.

An adapter delivers one ``OutgoingMessage`` and reports the outcome as a
``DeliveryReceipt``. Declines are reported through the receipt; anything an
adapter raises is treated by the dispatcher as a failed delivery.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from medtrack.notification.kinds import NotificationChannel


@dataclass(frozen=True)
class OutgoingMessage:
    to: str
    body: str
    subject: str | None = None  # Email only
    html_body: str | None = None  # Email only


@dataclass(frozen=True)
class DeliveryReceipt:
    sent: bool
    message_id: str | None = None
    error: str | None = None

    @property
    def status(self) -> str:
        return "sent" if self.sent else "failed"

    def to_dict(self) -> dict:
        return {"message_id": self.message_id, "status": self.status, "error": self.error}


class ChannelPort(ABC):
    channel: NotificationChannel

    @abstractmethod
    def deliver(self, message: OutgoingMessage) -> DeliveryReceipt: ...


class EmailPort(ChannelPort):
    channel = NotificationChannel.EMAIL


class SMSPort(ChannelPort):
    channel = NotificationChannel.SMS
