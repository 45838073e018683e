"""Per-client sessions: an identity plus the cookies the target sites set."""
import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Optional

from .identity import Identity, IdentityGenerator

logger = logging.getLogger(__name__)

SESSION_TTL = 3600.0


@dataclass
class Session:
    id: str
    created_at: float
    identity: Identity
    cookies: Dict[str, str] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    pins: int = field(default=0, repr=False, compare=False)


def parse_set_cookie(header):
    """Return the leading (name, value) pair of a Set-Cookie line, or None."""
    first = header.split(';', 1)[0].strip()
    if '=' not in first:
        return None
    name, value = first.split('=', 1)
    name = name.strip()
    if not name:
        return None
    return name, value.strip()


class SessionStore:
    def __init__(self, identities=None, ttl=SESSION_TTL, clock=time.time):
        self.identities = identities or IdentityGenerator()
        self.ttl = ttl
        self.clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def create_session(self) -> Session:
        session = Session(id=str(uuid.uuid4()), created_at=self.clock(), identity=self.identities.generate())
        with self._lock:
            self._sessions[session.id] = session
        logger.info(f"Created session {session.id} ({session.identity.archetype})")
        return session

    def get_or_create(self, session_id: Optional[str]) -> Session:
        """Return the live session for session_id, or a brand new one.

        A new session gets a fresh id, so callers must read ``session.id``
        rather than assume the requested id was honoured.
        """
        with self._lock:
            self._purge_expired()
            session = self._lookup(session_id)
        return session or self.create_session()

    @contextmanager
    def lease(self, session_id: Optional[str]):
        """Resolve a session like get_or_create and keep it from being purged until the block exits."""
        with self._lock:
            self._purge_expired()
            session = self._lookup(session_id)
            if session is not None:
                session.pins += 1
        if session is None:
            session = self.create_session()
            with self._lock:
                session.pins += 1
        try:
            yield session
        finally:
            with self._lock:
                session.pins -= 1

    def get(self, session_id) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def record_cookie(self, session_id, raw_set_cookie):
        session = self.get(session_id)
        if session is None:
            return
        pair = parse_set_cookie(raw_set_cookie)
        if pair is None:
            logger.debug(f"Ignoring malformed Set-Cookie for session {session_id}: {raw_set_cookie!r}")
            return
        name, value = pair
        with session.lock:
            session.cookies[name] = value
        logger.debug(f"Session {session_id} cookie {name} recorded")

    def cookie_header(self, session_id) -> str:
        session = self.get(session_id)
        if session is None:
            return ''
        with session.lock:
            return '; '.join(f"{name}={value}" for name, value in session.cookies.items())

    def _expired(self, session, now):
        return now - session.created_at > self.ttl

    def _lookup(self, session_id):
        # caller holds self._lock; a pinned but expired session is never handed out again
        session = self._sessions.get(session_id) if session_id else None
        if session is None or self._expired(session, self.clock()):
            return None
        return session

    def _purge_expired(self):
        # caller holds self._lock; pinned sessions are left for a later purge
        now = self.clock()
        expired = [
            key for key, session in self._sessions.items()
            if self._expired(session, now) and session.pins == 0
        ]
        for key in expired:
            del self._sessions[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired session(s)")
