"""ECDH key agreement on P-256 and AES-CBC encryption of log data."""

from __future__ import annotations

import abc
import os
import string

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_CURVE = ec.SECP256R1()
_KEY_LENGTH = 32
_AES_BLOCK_SIZE = 16
_AES_DEFAULT_KEY_LENGTH = 16
_HEX_DIGITS = frozenset(string.hexdigits)


class CryptError(RuntimeError):
    """Key agreement, encryption or decryption failed."""


def generate_ecdh_key_pair() -> tuple[bytes, bytes]:
    """New P-256 key pair: (32-byte private scalar, 65-byte uncompressed public point)."""
    private_key = ec.generate_private_key(_CURVE)
    private_bytes = private_key.private_numbers().private_value.to_bytes(_KEY_LENGTH, "big")
    public_bytes = private_key.public_key().public_bytes(
        encoding=_serialization_encoding(), format=_serialization_format()
    )
    return private_bytes, public_bytes


def _serialization_encoding():
    from cryptography.hazmat.primitives.serialization import Encoding

    return Encoding.X962


def _serialization_format():
    from cryptography.hazmat.primitives.serialization import PublicFormat

    return PublicFormat.UncompressedPoint


def compute_ecdh_shared_secret(private_key: bytes, peer_public_key: bytes) -> bytes:
    """The 32-byte ECDH shared secret of our private scalar and the peer's public point."""
    try:
        private = ec.derive_private_key(int.from_bytes(bytes(private_key), "big"), _CURVE)
        public = ec.EllipticCurvePublicKey.from_encoded_point(_CURVE, bytes(peer_public_key))
        return private.exchange(ec.ECDH(), public)
    except (ValueError, TypeError) as exc:
        raise CryptError("Failed to compute shared secret") from exc


def binary_key_to_hex(binary_key: bytes) -> str:
    """Upper-case hexadecimal form of ``binary_key``."""
    return bytes(binary_key).hex().upper()


def hex_key_to_binary(hex_key: str) -> bytes:
    """Decode hexadecimal digits, ignoring other characters and a trailing odd digit."""
    digits = "".join(ch for ch in hex_key if ch in _HEX_DIGITS)
    if len(digits) % 2:
        digits = digits[:-1]
    return bytes.fromhex(digits)


class Crypt(abc.ABC):
    """Symmetric cipher used for log records."""

    @abc.abstractmethod
    def encrypt(self, data: bytes) -> bytes:
        """Encrypt ``data``."""

    @abc.abstractmethod
    def decrypt(self, data: bytes) -> bytes:
        """Decrypt ``data``; raises :class:`CryptError` on failure."""


class AESCrypt(Crypt):
    """AES in CBC mode with PKCS#7 padding and a fixed IV."""

    _IV = b"dad0c0012340080a"

    def __init__(self, key: bytes) -> None:
        self._key = bytes(key)
        self._iv = self._IV

    @staticmethod
    def generate_key() -> str:
        """A random 128-bit AES key as upper-case hex."""
        return binary_key_to_hex(os.urandom(_AES_DEFAULT_KEY_LENGTH))

    @staticmethod
    def generate_iv() -> str:
        """A random IV of one AES block as upper-case hex."""
        return binary_key_to_hex(os.urandom(_AES_BLOCK_SIZE))

    def _cipher(self) -> Cipher:
        try:
            return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))
        except ValueError as exc:
            raise CryptError(str(exc)) from exc

    def encrypt(self, data: bytes) -> bytes:
        padder = padding.PKCS7(_AES_BLOCK_SIZE * 8).padder()
        padded = padder.update(bytes(data)) + padder.finalize()
        encryptor = self._cipher().encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    def decrypt(self, data: bytes) -> bytes:
        decryptor = self._cipher().decryptor()
        try:
            padded = decryptor.update(bytes(data)) + decryptor.finalize()
            unpadder = padding.PKCS7(_AES_BLOCK_SIZE * 8).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise CryptError(f"decryption failed: {exc}") from exc