"""Breakpoint notifications and Telegram replies.

Notifications are fire-and-forget: a failed delivery is logged and never
affects the run waiting on the breakpoint.

Replies flow the other way through `TelegramNotifier.poll`: messages in the
configured chat drive the breakpoint queue. Replying to a breakpoint message
releases that breakpoint. Otherwise the message releases the breakpoint whose
id it contains, and failing that the newest waiting one. The message text
becomes the review comment. A message starting with "reject" rejects instead
of approving.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import requests

from .checkpoints import BreakpointQueue, PendingBreakpoint

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
_MAX_MESSAGE_CHARS = 4000
_MAX_QUESTION_CHARS = 100

_LIST_RE = re.compile(r"^(list|ls|waiting)$", re.IGNORECASE)
_PREVIEW_RE = re.compile(r"^(preview|show)\s+(\d+)$", re.IGNORECASE)
_REPLY_ID_RE = re.compile(r"ID:\s*(\S+)", re.IGNORECASE)
_REJECT_RE = re.compile(r"^reject\b", re.IGNORECASE)


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _age(created_at: datetime, now: datetime) -> str:
    minutes = int((now - created_at).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes == 1:
        return "1 min ago"
    return f"{minutes} mins ago"


def format_breakpoint_message(pending: PendingBreakpoint) -> str:
    cp = pending.checkpoint
    lines = [
        f"Breakpoint: {cp.title}",
        f"Run: {pending.run_id}",
        f"ID: {pending.breakpoint_id}",
        "",
        cp.question,
    ]
    if cp.files:
        lines.append("")
        lines.append("Files:")
        for a in cp.files:
            label = a.label or cp.default_label or ""
            lines.append(f"- {label}: {a.path}" if label else f"- {a.path}")
    return _truncate("\n".join(lines), _MAX_MESSAGE_CHARS)


def format_waiting_list(
    waiting: list[PendingBreakpoint], now: datetime | None = None
) -> str:
    """Numbered list of waiting breakpoints, newest first."""

    if not waiting:
        return "No waiting breakpoints."
    now = now or datetime.now(tz=UTC)
    plural = "" if len(waiting) == 1 else "s"
    lines = [f"{len(waiting)} waiting breakpoint{plural}:", ""]
    for i, pending in enumerate(waiting, start=1):
        lines.extend(
            [
                f"{i}. {pending.checkpoint.title or 'Untitled'}",
                f"   ID: {pending.breakpoint_id}",
                f"   Run: {pending.run_id}",
                f"   Created: {_age(pending.created_at, now)}",
                f"   Question: {_truncate(pending.checkpoint.question, _MAX_QUESTION_CHARS)}",
            ]
        )
        if i < len(waiting):
            lines.append("")
    lines.extend(
        [
            "",
            "Commands:",
            "- list: show waiting breakpoints",
            "- preview <number>: view full details",
            "- reply to a breakpoint or send its ID to release it",
        ]
    )
    return _truncate("\n".join(lines), _MAX_MESSAGE_CHARS)


def format_preview(number: int, pending: PendingBreakpoint, now: datetime | None = None) -> str:
    cp = pending.checkpoint
    files = [
        f"{i}. {a.label or cp.default_label or a.path} ({a.format})"
        for i, a in enumerate(cp.files, start=1)
    ]
    lines = [
        f"Breakpoint #{number} Details",
        "",
        f"Title: {cp.title or 'Untitled'}",
        f"ID: {pending.breakpoint_id}",
        f"Run: {pending.run_id}",
        f"Created: {_age(pending.created_at, now or datetime.now(tz=UTC))}",
        "",
        "Question:",
        cp.question,
        "",
        "Context files:",
        "\n".join(files) if files else "None",
        "",
        "Reply to this message or send the ID to release it.",
    ]
    return _truncate("\n".join(lines), _MAX_MESSAGE_CHARS)


class TelegramNotifier:
    """Post breakpoint lifecycle messages to a Telegram chat via the Bot API."""

    def __init__(
        self,
        *,
        token: str,
        chat_id: str,
        api_base: str = TELEGRAM_API_BASE,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not token.strip():
            raise ValueError("Telegram bot token is required")
        if not chat_id.strip():
            raise ValueError("Telegram chat id is required")
        self._base = f"{api_base.rstrip('/')}/bot{token}"
        self._url = f"{self._base}/sendMessage"
        self._chat_id = chat_id
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self.last_update_id: int | None = None

    def breakpoint_created(self, pending: PendingBreakpoint) -> None:
        self._send(format_breakpoint_message(pending))

    def breakpoint_released(self, pending: PendingBreakpoint) -> None:
        decision = pending.decision
        verdict = "approved" if decision is not None and decision.approved else "rejected"
        text = f"Breakpoint {verdict}: {pending.checkpoint.title} (run {pending.run_id})"
        if decision is not None and decision.response:
            text += f"\n{decision.response}"
        self._send(text)

    def _send(self, text: str) -> None:
        try:
            resp = self._session.post(
                self._url,
                json={"chat_id": self._chat_id, "text": text},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Breakpoint notification failed", extra={"error": str(e)})

    def _get_updates(self) -> list[dict[str, Any]]:
        offset = self.last_update_id + 1 if self.last_update_id is not None else 0
        try:
            resp = self._session.get(
                f"{self._base}/getUpdates",
                params={"offset": offset, "allowed_updates": '["message"]'},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Telegram poll failed", extra={"error": str(e)})
            return []
        if not isinstance(body, Mapping) or not body.get("ok"):
            logger.warning("Telegram getUpdates was not ok", extra={"response": str(body)[:200]})
            return []
        result = body.get("result")
        return [u for u in result if isinstance(u, dict)] if isinstance(result, list) else []

    def poll(self, queue: BreakpointQueue) -> int:
        """Fetch new updates once and act on them.

        Returns the number of breakpoints released.
        """

        released = 0
        for update in self._get_updates():
            update_id = update.get("update_id")
            if isinstance(update_id, int):
                self.last_update_id = max(self.last_update_id or 0, update_id)
            message = update.get("message")
            if not isinstance(message, dict) or not message.get("text"):
                continue
            chat = message.get("chat") or {}
            if str(chat.get("id")) != self._chat_id:
                logger.debug("Ignoring Telegram message from another chat")
                continue
            if self._handle_message(queue, message):
                released += 1
        return released

    def _handle_message(self, queue: BreakpointQueue, message: Mapping[str, Any]) -> bool:
        text = str(message["text"]).strip()
        # Newest first, matching the numbering users see in `list`.
        waiting = list(reversed(queue.pending()))

        if _LIST_RE.match(text):
            self._send(format_waiting_list(waiting))
            return False
        if text.startswith("/"):
            self._send(
                "Telegram connected. Breakpoints will be announced here.\n\n"
                + format_waiting_list(waiting)
            )
            return False
        preview = _PREVIEW_RE.match(text)
        if preview:
            number = int(preview.group(2))
            if not 1 <= number <= len(waiting):
                self._send(f"Invalid number. Use a number between 1 and {len(waiting)}.")
            else:
                self._send(format_preview(number, waiting[number - 1]))
            return False

        breakpoint_id = self._target(text, message, waiting)
        if breakpoint_id is None:
            logger.debug("No waiting breakpoint for Telegram message")
            return False

        sender = (message.get("from") or {}).get("username")
        approved = not _REJECT_RE.match(text)
        try:
            queue.resolve(
                breakpoint_id,
                approved=approved,
                response=text,
                reviewer=f"telegram:{sender}" if sender else "telegram",
            )
        except KeyError:
            logger.info(
                "Breakpoint already released", extra={"breakpoint_id": breakpoint_id}
            )
            return False

        verdict = "released" if approved else "rejected"
        self._send(f"Breakpoint {verdict}\n\nID: {breakpoint_id}\n\nFeedback:\n{text}")
        return True

    @staticmethod
    def _target(
        text: str, message: Mapping[str, Any], waiting: list[PendingBreakpoint]
    ) -> str | None:
        reply = message.get("reply_to_message") or {}
        match = _REPLY_ID_RE.search(str(reply.get("text") or ""))
        if match:
            return match.group(1)
        words = set(text.split())
        for pending in waiting:
            if pending.breakpoint_id in words:
                return pending.breakpoint_id
        return waiting[0].breakpoint_id if waiting else None

    def run_polling(
        self, queue: BreakpointQueue, stop: threading.Event, interval_seconds: float = 5.0
    ) -> None:
        """Poll until `stop` is set."""

        while not stop.is_set():
            self.poll(queue)
            stop.wait(interval_seconds)

    def close(self) -> None:
        self._session.close()
