"""Password-based AES encryption for offline attendee payloads.

Token format: ``urlsafe_b64(iv) + "|" + urlsafe_b64(ciphertext)``, without
Base64 padding and without a version byte. Scanning devices decode this exact
format, so the key derivation below must stay as it is: PBKDF2-HMAC-SHA1,
1000 iterations, 256-bit key, with the secret used as its own salt. The secret
is a per-ticket credential code, not a user password.
"""

import base64
import binascii
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from checkin.domain.errors import CryptoFailure

CIPHER_ALGORITHM = "AES/CBC/PKCS5Padding"
KDF_ITERATIONS = 1000
KEY_LENGTH_BYTES = 32
BLOCK_SIZE_BITS = algorithms.AES.block_size
IV_LENGTH_BYTES = BLOCK_SIZE_BITS // 8
SEPARATOR = "|"


@dataclass(frozen=True)
class DerivedKey:
    algorithm: str
    key: bytes


def derive_key(secret: str) -> DerivedKey:
    raw = secret.encode("utf-8")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA1(),
        length=KEY_LENGTH_BYTES,
        salt=raw,
        iterations=KDF_ITERATIONS,
    )
    return DerivedKey(algorithm=CIPHER_ALGORITHM, key=kdf.derive(raw))


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def encrypt(secret: str, plaintext: str) -> str:
    """Encrypt ``plaintext`` under a key derived from ``secret``.

    A fresh IV is drawn for every call, so the same input never yields the same
    token twice.
    """
    derived = derive_key(secret)
    iv = os.urandom(IV_LENGTH_BYTES)
    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(derived.key), modes.CBC(iv)).encryptor()
    body = encryptor.update(padded) + encryptor.finalize()
    return _b64encode(iv) + SEPARATOR + _b64encode(body)


def decrypt(secret: str, token: str) -> str:
    """Reverse :func:`encrypt`.

    Raises:
        CryptoFailure: If the token is malformed, the key does not match, or the
            decrypted bytes are not valid UTF-8.
    """
    parts = token.split(SEPARATOR)
    if len(parts) != 2:
        raise CryptoFailure("Malformed token")
    derived = derive_key(secret)
    try:
        iv = _b64decode(parts[0])
        body = _b64decode(parts[1])
        decryptor = Cipher(algorithms.AES(derived.key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise CryptoFailure("Unable to decrypt token") from exc
