"""
Identity Service - Resolves who is behind a Socket.IO connection.

This service handles:
- Verifying presented credentials (signed, timed tokens)
- Binding a connection id to a participant id for the connection's lifetime
- Looking up every live connection of a participant
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from src.core.errors import UnauthenticatedError

logger = logging.getLogger(__name__)

TOKEN_SALT = 'partyrooms-identity'


class SignedTokenVerifier:
    """Verifies tokens of the form ``{"sub": participant_id}`` signed with the app secret."""

    def __init__(self, secret_key: str, max_age_seconds: int = 86400):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self.max_age_seconds = max_age_seconds

    def issue_token(self, participant_id: str) -> str:
        """Issue a token for a participant (development and tests)."""
        return self._serializer.dumps({'sub': participant_id})

    def authenticate(self, credential: Any) -> str:
        """
        Resolve a credential to a participant id.

        Raises:
            UnauthenticatedError: If the credential is missing, malformed,
                tampered with or expired
        """
        if not credential or not isinstance(credential, str):
            raise UnauthenticatedError("No token provided")

        try:
            payload = self._serializer.loads(credential, max_age=self.max_age_seconds)
        except SignatureExpired:
            raise UnauthenticatedError("Token expired")
        except BadSignature:
            raise UnauthenticatedError("Invalid token")

        participant_id = payload.get('sub') if isinstance(payload, dict) else None
        if not isinstance(participant_id, str) or not participant_id:
            raise UnauthenticatedError("Token has no subject")
        return participant_id


class IdentityService:
    """Binds Socket.IO connections to authenticated participants."""

    def __init__(self, verifier: SignedTokenVerifier):
        self.verifier = verifier
        # connection id -> participant id
        self._bindings: Dict[str, str] = {}
        self._lock = threading.Lock()
        logger.info("IdentityService initialized")

    def authenticate(self, credential: Any) -> str:
        return self.verifier.authenticate(credential)

    def bind(self, connection_id: str, participant_id: str) -> None:
        """Bind a connection to a participant until it disconnects."""
        with self._lock:
            self._bindings[connection_id] = participant_id
        logger.debug(f"Bound connection {connection_id} to participant {participant_id}")

    def connect(self, connection_id: str, credential: Any) -> str:
        """Authenticate a credential once and bind the connection to its participant."""
        participant_id = self.authenticate(credential)
        self.bind(connection_id, participant_id)
        return participant_id

    def resolve(self, connection_id: str) -> str:
        """
        Participant bound to a connection.

        Raises:
            UnauthenticatedError: If the connection was never authenticated
        """
        with self._lock:
            participant_id = self._bindings.get(connection_id)
        if participant_id is None:
            raise UnauthenticatedError("Connection is not authenticated")
        return participant_id

    def get_participant(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._bindings.get(connection_id)

    def unbind(self, connection_id: str) -> Optional[str]:
        """Forget a connection, returning the participant it was bound to."""
        with self._lock:
            participant_id = self._bindings.pop(connection_id, None)
        if participant_id:
            logger.debug(f"Unbound connection {connection_id} from participant {participant_id}")
        return participant_id

    def connections_for(self, participant_id: str) -> List[str]:
        """All live connections bound to a participant."""
        with self._lock:
            return [cid for cid, pid in self._bindings.items() if pid == participant_id]

    def get_connection_count(self) -> int:
        with self._lock:
            return len(self._bindings)
