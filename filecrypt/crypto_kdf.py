# --------------------------------------------------------------
# File: crypto_kdf.py
# Description: Claves de cifrado de archivos derivadas de una passphrase.
# --------------------------------------------------------------
"""Derivación Argon2id de claves dimensionadas para el cifrador elegido."""

from __future__ import annotations

from typing import NamedTuple, Optional

from argon2.low_level import Type, hash_secret_raw

from filecrypt.crypto_rand import random_bytes
from filecrypt.crypto_sym import key_sizes
from filecrypt.exceptions import ConfigError

__all__ = ["MIN_SALT_BYTES", "SALT_BYTES", "DerivedKey", "derive_key"]

SALT_BYTES = 16
# Argon2 rechaza salts más cortas.
MIN_SALT_BYTES = 8


class DerivedKey(NamedTuple):
    """Clave derivada junto con la salt que el llamador debe persistir."""

    key: bytes
    salt: bytes


def derive_key(
    passphrase: str,
    cipher: str = "aes",
    salt: Optional[bytes] = None,
    *,
    t: int = 3,
    m: int = 64 * 1024,
    p: int = 1,
) -> DerivedKey:
    """Deriva la clave más larga que admite `cipher` a partir de una passphrase.

    Sin `salt` se genera una nueva de `SALT_BYTES` bytes; para volver a
    obtener la misma clave hay que pasar la salt devuelta.

    Raises:
        ConfigError: Si el cifrador no existe o la salt es demasiado corta.

    """

    try:
        outlen = max(key_sizes(cipher))
    except ValueError as exc:
        raise ConfigError("Cifrador no válido para derivar la clave") from exc
    if salt is None:
        salt = random_bytes(SALT_BYTES)
    elif len(salt) < MIN_SALT_BYTES:
        raise ConfigError(f"La salt debe tener al menos {MIN_SALT_BYTES} bytes")

    key = hash_secret_raw(
        passphrase.encode("utf-8"),
        salt,
        time_cost=t,
        memory_cost=m,
        parallelism=p,
        hash_len=outlen,
        type=Type.ID,
    )
    return DerivedKey(key, salt)
