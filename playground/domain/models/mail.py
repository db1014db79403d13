"""Domain models for the disposable mailbox context (mail.tm)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .common import AccountId, MessageId


@dataclass
class MailTmAccount:
    id: AccountId
    address: str
    password: str
    quota: int = 0
    used: int = 0
    created_at: Optional[datetime] = None


@dataclass
class MailTmAddress:
    address: str
    name: Optional[str] = None

    def display(self) -> str:
        return f"{self.name} <{self.address}>" if self.name else self.address


@dataclass
class MailTmMessage:
    id: MessageId
    subject: str
    sender: Optional[MailTmAddress] = None
    recipients: List[MailTmAddress] = field(default_factory=list)
    created_at: Optional[datetime] = None
    intro: Optional[str] = None
    is_read: bool = False
    text: Optional[str] = None
    html: List[str] = field(default_factory=list)

    @property
    def body(self) -> str:
        """Plain text body, falling back to the joined HTML parts."""
        if self.text:
            return self.text
        return "\n".join(self.html)
