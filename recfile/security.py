"""
Recfile Security - Confidential field encryption.

A descriptor may declare `%confidential: Password Pin` to mark fields whose
values must not be stored in clear text. Those values are written as

    Password: encrypted-<base64(salt + nonce + ciphertext + tag)>

Security features:
  - AES-256-GCM authenticated encryption per value
  - Key derivation via PBKDF2-SHA256 with a fresh salt per value
  - Tamper detection (GCM tag fails on any modified byte or wrong password)
"""

from __future__ import annotations

import base64
import hashlib
import os
from typing import TYPE_CHECKING

from recfile.spec import CONFIDENTIAL_PROPERTY, ENCRYPTED_PREFIX

if TYPE_CHECKING:
    from recfile.database import Database, Descriptor

KDF_ITERATIONS = 600_000  # OWASP recommended minimum
SALT_SIZE = 16
NONCE_SIZE = 12


def _aesgcm(key: bytes):
    try:
        from cryptography.hazmat.primitives.ciphers.aead import AESGCM
    except ImportError:
        raise ImportError(
            "The 'cryptography' package is required for confidential fields. "
            "Install it with: pip install cryptography"
        )
    return AESGCM(key)


def _derive_key(password: str, salt: bytes) -> bytes:
    """Derive a 256-bit key from a password using PBKDF2."""
    return hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        iterations=KDF_ITERATIONS,
        dklen=32,
    )


# =============================================================================
# Single values
# =============================================================================

def is_encrypted_value(value: str) -> bool:
    return value.startswith(ENCRYPTED_PREFIX)


def encrypt_value(value: str, password: str) -> str:
    """Encrypt one field value. Returns the `encrypted-...` form."""
    salt = os.urandom(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = _aesgcm(_derive_key(password, salt)).encrypt(nonce, value.encode("utf-8"), None)
    return ENCRYPTED_PREFIX + base64.b64encode(salt + nonce + ciphertext).decode("ascii")


def decrypt_value(value: str, password: str) -> str:
    """
    Decrypt a value produced by encrypt_value().

    Raises ValueError if the value is not in encrypted form, and
    cryptography's InvalidTag if the password is wrong or the value was
    tampered with.
    """
    if not is_encrypted_value(value):
        raise ValueError("value is not encrypted")

    payload = base64.b64decode(value[len(ENCRYPTED_PREFIX):], validate=True)
    salt = payload[:SALT_SIZE]
    nonce = payload[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
    ciphertext = payload[SALT_SIZE + NONCE_SIZE:]

    plaintext = _aesgcm(_derive_key(password, salt)).decrypt(nonce, ciphertext, None)
    return plaintext.decode("utf-8")


# =============================================================================
# Whole databases
# =============================================================================

def confidential_fields(descriptor: Descriptor) -> set[str]:
    """Field names listed by the descriptor's %confidential properties."""
    names: set[str] = set()
    for prop in descriptor.get_properties(CONFIDENTIAL_PROPERTY):
        names.update(prop.value.split())
    return names


def encrypt_confidential(database: Database, password: str) -> int:
    """
    Encrypt, in place, every confidential field value that is still clear
    text. Returns the number of values encrypted.
    """
    count = 0
    for record_set in database.record_sets:
        names = confidential_fields(record_set.descriptor)
        if not names:
            continue
        for record in record_set.records:
            for f in record.fields:
                if f.name in names and not is_encrypted_value(f.value):
                    f.value = encrypt_value(f.value, password)
                    count += 1
    return count


def decrypt_confidential(database: Database, password: str) -> int:
    """
    Decrypt, in place, every encrypted confidential field value. Returns the
    number of values decrypted.
    """
    count = 0
    for record_set in database.record_sets:
        names = confidential_fields(record_set.descriptor)
        if not names:
            continue
        for record in record_set.records:
            for f in record.fields:
                if f.name in names and is_encrypted_value(f.value):
                    f.value = decrypt_value(f.value, password)
                    count += 1
    return count
