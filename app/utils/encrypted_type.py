"""SQLAlchemy TypeDecorator for transparent Fernet encryption of text columns."""

import base64
import logging
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from sqlalchemy import Text, TypeDecorator

log = logging.getLogger(__name__)

_SALT = b"clubhouse-credential-salt-v1"


@lru_cache(maxsize=4)
def _derive_key(secret: str) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_SALT,
        iterations=100_000,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode()))


def get_fernet() -> Fernet:
    """Derive a Fernet key from the app secret key."""
    from ..config import settings

    return Fernet(_derive_key(settings.secret_key))


class EncryptedText(TypeDecorator):
    """Transparently encrypts/decrypts text values stored in the database."""
    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return get_fernet().encrypt(value.encode()).decode()

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        try:
            return get_fernet().decrypt(value.encode()).decode()
        except InvalidToken:
            log.warning("Stored credential could not be decrypted (secret key rotated?)")
            return None
