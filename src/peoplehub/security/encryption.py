"""AES-256-GCM encryption for sensitive columns, with key versioning for rotation."""

import base64
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from peoplehub.config import get_settings


class EncryptionService:
    """Encrypt and decrypt sensitive strings (national ids) at rest.

    New values are always encrypted with the current key; stored values can
    be decrypted with any key in the chain.

    Data format: magic (2 bytes) + key version (1 byte) + nonce (12 bytes) + ciphertext
    """

    MAGIC_BYTES = b"\xEC\x01"
    MAGIC_SIZE = 2
    VERSION_SIZE = 1
    NONCE_SIZE = 12  # 96 bits for GCM

    def __init__(
        self,
        current_key: str | None = None,
        legacy_keys: list[str] | None = None,
    ) -> None:
        """Initialize with the current key and optional legacy keys.

        Args:
            current_key: Current key (URL-safe base64, 32 bytes decoded)
            legacy_keys: Keys still accepted for decryption (oldest to newest)
        """
        if current_key is None or legacy_keys is None:
            settings = get_settings()
            if current_key is None:
                current_key = settings.encryption_key
            if legacy_keys is None:
                legacy_keys = settings.encryption_key_legacy_list

        self._key_chain: list[bytes] = [self._decode_key(key) for key in legacy_keys]
        self._key_chain.append(self._decode_key(current_key))
        self._current_aesgcm = AESGCM(self._key_chain[-1])

    @staticmethod
    def _decode_key(key: str) -> bytes:
        """Decode and validate a base64-encoded key.

        Raises:
            ValueError: If key is not valid base64 or not 32 bytes
        """
        try:
            padded_key = key + "=" * (-len(key) % 4)
            decoded = base64.urlsafe_b64decode(padded_key)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid base64-encoded encryption key: {type(e).__name__}") from e

        if len(decoded) != 32:
            raise ValueError("Encryption key must be 32 bytes (256 bits)")
        return decoded

    def encrypt_string(self, value: str) -> bytes:
        """Encrypt a string with the current key."""
        nonce = os.urandom(self.NONCE_SIZE)
        ciphertext = self._current_aesgcm.encrypt(nonce, value.encode("utf-8"), None)
        version = len(self._key_chain) - 1
        return self.MAGIC_BYTES + bytes([version]) + nonce + ciphertext

    def decrypt_string(self, encrypted: bytes) -> str:
        """Decrypt bytes produced by ``encrypt_string``.

        Raises:
            ValueError: If the data is malformed or no key can decrypt it
        """
        header_size = self.MAGIC_SIZE + self.VERSION_SIZE
        if len(encrypted) < header_size + self.NONCE_SIZE + 1:
            raise ValueError("Invalid encrypted data: too short")
        if encrypted[: self.MAGIC_SIZE] != self.MAGIC_BYTES:
            raise ValueError("Invalid encrypted data: unknown format")

        version = encrypted[self.MAGIC_SIZE]
        nonce = encrypted[header_size : header_size + self.NONCE_SIZE]
        ciphertext = encrypted[header_size + self.NONCE_SIZE :]

        # Try the recorded key version first, then the rest newest to oldest
        candidates = []
        if version < len(self._key_chain):
            candidates.append(self._key_chain[version])
        candidates.extend(key for key in reversed(self._key_chain) if key not in candidates)

        for key in candidates:
            try:
                return AESGCM(key).decrypt(nonce, ciphertext, None).decode("utf-8")
            except InvalidTag:
                continue

        raise ValueError("Decryption failed: no valid key found")

    def re_encrypt(self, encrypted: bytes) -> bytes:
        """Re-encrypt data with the current key (key rotation)."""
        return self.encrypt_string(self.decrypt_string(encrypted))


# Global instance
_encryption_service: EncryptionService | None = None


def get_encryption_service() -> EncryptionService:
    """Get or create the encryption service singleton."""
    global _encryption_service
    if _encryption_service is None:
        _encryption_service = EncryptionService()
    return _encryption_service


def reset_encryption_service() -> None:
    """Reset the encryption service singleton (for testing or key rotation)."""
    global _encryption_service
    _encryption_service = None
