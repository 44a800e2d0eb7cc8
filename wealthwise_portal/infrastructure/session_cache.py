"""Ephemeral session cache holding serialized client records"""

import json
import threading
from datetime import datetime, timedelta, timezone
from secrets import token_urlsafe
from typing import Dict, Optional, Tuple

from wealthwise_portal.config import settings
from wealthwise_portal.domain.exceptions import InvalidRecordError
from wealthwise_portal.domain.models import ClientRecord

SESSION_COOKIE = "portal_session"


class SessionCache:
    """
    Short-lived client records for visitors without a verified identity
    session (token logins whose magic link could not be sent).

    Entries are populated on token exchange, read once per request and
    removed on sign-out; expired entries are dropped when read and swept
    whenever a new session is stored.
    """

    def __init__(self, ttl_minutes: int | None = None):
        self._ttl = timedelta(minutes=ttl_minutes or settings.session_ttl_minutes)
        self._entries: Dict[str, Tuple[str, datetime]] = {}
        self._lock = threading.Lock()

    def store(self, client: ClientRecord, at: datetime | None = None) -> str:
        """Cache ``client`` and return the new session id"""
        moment = at or datetime.now(timezone.utc)
        session_id = token_urlsafe(24)
        payload = json.dumps(client.to_dict())
        with self._lock:
            self._purge_expired(moment)
            self._entries[session_id] = (payload, moment + self._ttl)
        return session_id

    def load(self, session_id: str | None, at: datetime | None = None) -> Optional[ClientRecord]:
        if not session_id:
            return None
        moment = at or datetime.now(timezone.utc)
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            payload, expires_at = entry
            if moment >= expires_at:
                del self._entries[session_id]
                return None

        try:
            return ClientRecord.from_row(json.loads(payload))
        except (InvalidRecordError, ValueError):
            self.clear(session_id)
            return None

    def clear(self, session_id: str | None) -> None:
        if not session_id:
            return
        with self._lock:
            self._entries.pop(session_id, None)

    def _purge_expired(self, moment: datetime) -> None:
        # Caller holds the lock
        expired = [key for key, (_, expires_at) in self._entries.items() if moment >= expires_at]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)


session_cache = SessionCache()
