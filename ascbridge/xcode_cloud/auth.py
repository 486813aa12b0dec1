"""Signed bearer tokens for App Store Connect API authentication."""

import logging
import time

from jose import jwk, jwt
from jose.backends.base import Key
from jose.exceptions import JOSEError

from ascbridge.xcode_cloud.errors import ConfigurationError
from ascbridge.xcode_cloud.models.config import AppStoreConnectConfig

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"
AUDIENCE = "appstoreconnect-v1"
TOKEN_LIFETIME_SECONDS = 20 * 60


class TokenSigner:
    """Produce short-lived ES256 tokens from an App Store Connect API key.

    The key file is read and parsed once, when the signer is created, so a
    missing, unreadable or malformed key fails before any request is made. A new token is signed
    on every call to get_token; tokens are never cached.
    """

    def __init__(self, config: AppStoreConnectConfig) -> None:
        """Initialize signer and load the private key."""
        if not config.key_id or not config.issuer_id:
            raise ConfigurationError(
                "Both a key ID and an issuer ID are required to sign tokens"
            )
        self.key_id = config.key_id
        self.issuer_id = config.issuer_id
        self._private_key = self._read_private_key(config)
        logger.debug(f"Token signer ready for key {self.key_id}")

    def get_token(self) -> str:
        """Sign and return a fresh bearer token.

        Raises:
            ConfigurationError: If the key material cannot sign a token

        """
        issued_at = int(time.time())
        claims = {
            "iss": self.issuer_id,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME_SECONDS,
            "aud": AUDIENCE,
        }
        try:
            return jwt.encode(
                claims,
                self._private_key,
                algorithm=ALGORITHM,
                headers={"kid": self.key_id},
            )
        except JOSEError as e:
            raise ConfigurationError(
                f"Unable to sign token with key {self.key_id}: invalid private key"
            ) from e

    @staticmethod
    def _read_private_key(config: AppStoreConnectConfig) -> Key:
        try:
            key = config.p8_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read P8 private key file at: {config.p8_path}"
            ) from e

        if not key.strip():
            raise ConfigurationError(f"P8 private key file is empty: {config.p8_path}")

        try:
            private_key = jwk.construct(key, ALGORITHM)
        except JOSEError as e:
            raise ConfigurationError(
                f"P8 private key file is not a valid EC private key: {config.p8_path}"
            ) from e

        if private_key.is_public():
            raise ConfigurationError(
                f"P8 private key file holds a public key: {config.p8_path}"
            )

        return private_key
