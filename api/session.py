"""In-process session management with signed session ids."""

import logging
from datetime import datetime, timedelta
from random import Random
from uuid import uuid4

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from config import config
from core.game import BlackjackGame

logger = logging.getLogger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the signer with a secret key."""
        self._secret_key = secret_key or config.security.secret_key
        self._serializer = URLSafeTimedSerializer(self._secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract session_id from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID if valid, None otherwise
        """
        max_age = max_age or config.session_ttl
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired):
            return None


# Global signer instance
_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


def new_game(rng: Random | None = None) -> BlackjackGame:
    """Create a game from the configured table defaults."""
    return BlackjackGame(
        starting_bankroll=config.game.starting_bankroll,
        house_edge=config.game.house_edge,
        reshuffle_threshold=config.game.reshuffle_threshold,
        max_hands=config.game.max_hands,
        rng=rng,
    )


class InMemorySessionStore:
    """
    Holds one live game per session.

    Nothing is persisted: bankroll and last bet survive across rounds but
    not across a process restart.
    """

    def __init__(self, ttl: int | None = None) -> None:
        self._ttl = ttl or config.session_ttl
        self._sessions: dict[str, tuple[BlackjackGame, datetime]] = {}

    def create(self, game: BlackjackGame | None = None) -> str:
        """Register a game and return its signed session token."""
        self.cleanup_expired()
        token = get_session_signer().sign(str(uuid4()))
        self.set(token, game or new_game())
        logger.info("Session created")
        return token

    def get(self, token: str) -> BlackjackGame | None:
        """Get the game for a session, refreshing its expiry."""
        if token not in self._sessions:
            return None

        game, expiry = self._sessions[token]
        if expiry < datetime.now():
            self.delete(token)
            return None

        self._sessions[token] = (game, self._expiry())
        return game

    def set(self, token: str, game: BlackjackGame) -> None:
        """Attach a game to a session."""
        self._sessions[token] = (game, self._expiry())

    def delete(self, token: str) -> None:
        """Delete session."""
        self._sessions.pop(token, None)

    def exists(self, token: str) -> bool:
        """Check if session exists."""
        return self.get(token) is not None

    def cleanup_expired(self) -> int:
        """Remove expired sessions."""
        now = datetime.now()
        expired = [
            sid for sid, (_, expiry) in self._sessions.items() if expiry < now
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Dropped %d expired sessions", len(expired))
        return len(expired)

    def _expiry(self) -> datetime:
        return datetime.now() + timedelta(seconds=self._ttl)

    def __len__(self) -> int:
        return len(self._sessions)


# Global session store instance
_session_store: InMemorySessionStore | None = None


def get_session_store() -> InMemorySessionStore:
    """Get or create the session store."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore()
    return _session_store


def extract_session_id(token: str) -> str | None:
    """
    Extract the raw session ID from a signed token.

    Args:
        token: The signed session token

    Returns:
        The raw session ID if valid, None otherwise
    """
    signer = get_session_signer()
    return signer.unsign(token)
