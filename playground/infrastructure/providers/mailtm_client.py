"""mail.tm disposable mailbox client.

Creates a throwaway account, reads its inbox and deletes it again. The
bearer token obtained at account creation is the only state the client
keeps between calls.
"""

import logging
import re
import secrets
import string
import time
from typing import Any, Dict, List, Optional

import httpx

from playground.domain.models.common import MAILTM, AccountId, MessageId
from playground.domain.models.mail import MailTmAccount, MailTmAddress, MailTmMessage
from playground.domain.models.resilience import throttle_for
from playground.infrastructure.providers.errors import MailTmError
from playground.infrastructure.providers.http import (
    DEFAULT_TIMEOUT_S,
    create_async_client,
    object_list,
    opt_int,
    opt_str,
    parse_timestamp,
)
from playground.infrastructure.resilience.executor import ResilientExecutor

logger = logging.getLogger(__name__)

BASE_URL = "https://api.mail.tm"
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"
PASSWORD_LENGTH = 20
NOT_AUTHENTICATED = "Not authenticated. Call create_account first."

_URL_RE = re.compile(r"""https?://[^\s<>"'\)\]]+""")


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def extract_urls(text: Optional[str]) -> List[str]:
    """Distinct http(s) URLs in order of first appearance."""
    if not text:
        return []
    seen: Dict[str, None] = {}
    for url in _URL_RE.findall(text):
        seen.setdefault(url, None)
    return list(seen)


def truncate(value: Optional[str], max_length: int) -> str:
    if not value:
        return ""
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def _member_list(payload: Any) -> Optional[List[Dict[str, Any]]]:
    """mail.tm answers either a bare array or a Hydra collection."""
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if isinstance(payload, dict) and isinstance(payload.get("hydra:member"), list):
        return object_list(payload, "hydra:member")
    return None


def _parse_address(value: Any) -> Optional[MailTmAddress]:
    if not isinstance(value, dict) or not opt_str(value, "address"):
        return None
    return MailTmAddress(address=opt_str(value, "address") or "", name=opt_str(value, "name"))


def parse_message(data: Dict[str, Any]) -> MailTmMessage:
    html = data.get("html")
    if isinstance(html, str):
        html_parts = [html]
    elif isinstance(html, list):
        html_parts = [part for part in html if isinstance(part, str)]
    else:
        html_parts = []
    recipients = [address for address in map(_parse_address, data.get("to") or []) if address]
    return MailTmMessage(
        id=MessageId(opt_str(data, "id") or ""),
        subject=opt_str(data, "subject") or "",
        sender=_parse_address(data.get("from")),
        recipients=recipients,
        created_at=parse_timestamp(data.get("createdAt")),
        intro=opt_str(data, "intro"),
        is_read=bool(data.get("seen") or data.get("isRead")),
        text=data.get("text") if isinstance(data.get("text"), str) else None,
        html=html_parts,
    )


class MailTmClient:
    """Async client for the mail.tm API."""

    def __init__(
        self,
        executor: ResilientExecutor,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the client.

        Args:
            executor: Executor configured with the mail.tm retry preset.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests).
        """
        self.executor = executor
        self.timeout = timeout
        self._transport = transport
        self.auth_token: Optional[str] = None
        self.account: Optional[MailTmAccount] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.auth_token)

    def _client(self, authenticated: bool = False) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.auth_token}"} if authenticated else None
        return create_async_client(BASE_URL, headers=headers, timeout=self.timeout, transport=self._transport)

    def _require_auth(self) -> None:
        if not self.auth_token or self.account is None:
            raise MailTmError(NOT_AUTHENTICATED)

    # --- Account lifecycle ---

    async def get_domain(self) -> str:
        """Returns the first domain mail.tm offers for new accounts."""
        async def operation() -> str:
            async with self._client() as http:
                response = await http.get("/domains")
            if not response.is_success:
                raise MailTmError(f"Failed to get domains: {response.status_code}", response.status_code)
            domains = _member_list(response.json())
            if domains:
                domain = opt_str(domains[0], "domain")
                if domain:
                    return domain
            raise MailTmError("No available domains found")

        return await self.executor.execute(operation, throttle_for(MAILTM), MAILTM)

    async def create_account(self) -> MailTmAccount:
        """Registers a random address and logs in with it.

        Account creation and login run inside one retried operation.
        """
        domain = await self.get_domain()
        address = f"test_{time.time_ns() // 100}@{domain}"
        password = generate_password()
        logger.info(f"Creating mail.tm account {address}")

        async def operation() -> MailTmAccount:
            credentials = {"address": address, "password": password}
            async with self._client() as http:
                response = await http.post("/accounts", json=credentials)
                if not response.is_success:
                    raise MailTmError(
                        f"Failed to create account: {response.status_code} - {response.text}",
                        response.status_code,
                    )
                data = response.json()
                account = MailTmAccount(
                    id=AccountId(opt_str(data, "id") or ""),
                    address=opt_str(data, "address") or address,
                    password=password,
                    quota=opt_int(data, "quota") or 0,
                    used=opt_int(data, "used") or 0,
                    created_at=parse_timestamp(data.get("createdAt")),
                )

                token_response = await http.post("/token", json=credentials)
                token = None
                if token_response.is_success:
                    token = opt_str(token_response.json(), "token")
                if not token:
                    raise MailTmError(f"Authentication failed: {token_response.status_code}", token_response.status_code)

            self.account = account
            self.auth_token = token
            return account

        account = await self.executor.execute(operation, throttle_for(MAILTM), MAILTM)
        logger.info(f"Account created: {account.address} (id={account.id})")
        return account

    async def delete_account(self) -> bool:
        """Deletes the current account and forgets the credentials."""
        self._require_auth()
        account_id = self.account.id

        async def operation() -> bool:
            async with self._client(authenticated=True) as http:
                response = await http.delete(f"/accounts/{account_id}")
            if not response.is_success:
                raise MailTmError(f"Failed to delete account: {response.status_code}", response.status_code)
            return True

        result = await self.executor.execute(operation, throttle_for(MAILTM), MAILTM)
        self.auth_token = None
        self.account = None
        logger.info("Account deleted")
        return result

    # --- Messages ---

    async def get_inbox(self) -> List[MailTmMessage]:
        self._require_auth()

        async def operation() -> List[MailTmMessage]:
            async with self._client(authenticated=True) as http:
                response = await http.get("/messages")
            if not response.is_success:
                raise MailTmError(f"Failed to fetch inbox: {response.status_code}", response.status_code)
            members = _member_list(response.json())
            if members is None:
                raise MailTmError("Unexpected inbox response format")
            return [parse_message(item) for item in members]

        messages = await self.executor.execute(operation, throttle_for(MAILTM), MAILTM)
        logger.debug(f"Found {len(messages)} messages")
        return messages

    async def read_message(self, message_id: str) -> MailTmMessage:
        self._require_auth()

        async def operation() -> MailTmMessage:
            async with self._client(authenticated=True) as http:
                response = await http.get(f"/messages/{message_id}")
            if not response.is_success:
                raise MailTmError(f"Failed to read message: {response.status_code}", response.status_code)
            data = response.json()
            if not isinstance(data, dict):
                raise MailTmError("Unexpected message response format")
            return parse_message(data)

        return await self.executor.execute(operation, throttle_for(MAILTM), MAILTM)
