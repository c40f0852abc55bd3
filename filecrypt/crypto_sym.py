# --------------------------------------------------------------
# File: crypto_sym.py
# Description: Primitivas de cifrado por bloques para transformar flujos de bytes.
# --------------------------------------------------------------
"""Registro de cifradores y transformaciones incrementales de cifrado."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, FrozenSet, Optional, Type

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.decrepit.ciphers.algorithms import Camellia, TripleDES
from cryptography.hazmat.decrepit.ciphers.modes import CFB, OFB
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import (
    BlockCipherAlgorithm,
    Cipher,
    CipherContext,
    algorithms,
    modes,
)

__all__ = [
    "CIPHERS",
    "MODES",
    "CipherTransform",
    "block_size",
    "check_pair",
    "decrypting_transform",
    "encrypting_transform",
    "is_padded",
    "key_sizes",
    "resolve_cipher",
    "resolve_mode",
]

CIPHERS: Dict[str, Type[BlockCipherAlgorithm]] = {
    "aes": algorithms.AES,
    "camellia": Camellia,
    "tripledes": TripleDES,
}

MODES: Dict[str, Type[modes.Mode]] = {
    "cbc": modes.CBC,
    "cfb": CFB,
    "ofb": OFB,
    "ctr": modes.CTR,
}

# Modos que sólo aceptan múltiplos del bloque y por tanto requieren relleno.
PADDED_MODES = frozenset({"cbc"})


def resolve_cipher(name: str) -> Type[BlockCipherAlgorithm]:
    """Devuelve la clase de algoritmo registrada bajo `name`.

    Raises:
        ValueError: Si el cifrador no está soportado.

    """

    try:
        return CIPHERS[name.lower()]
    except KeyError:
        raise ValueError(f"Cifrador no soportado: {name!r}") from None


def resolve_mode(name: str) -> Type[modes.Mode]:
    """Devuelve la clase de modo de operación registrada bajo `name`.

    Raises:
        ValueError: Si el modo no está soportado.

    """

    try:
        return MODES[name.lower()]
    except KeyError:
        raise ValueError(f"Modo no soportado: {name!r}") from None


def block_size(cipher: str, mode: str) -> int:
    """Calcula el tamaño de bloque (y de IV) en bytes para el par cifrador/modo.

    Todos los modos registrados usan un IV del tamaño del bloque del
    algoritmo, por lo que el modo sólo se valida.

    Args:
        cipher (str): Nombre del cifrador, p. ej. ``"aes"``.
        mode (str): Nombre del modo, p. ej. ``"cbc"``.

    Returns:
        int: Tamaño de bloque en bytes.

    """

    resolve_mode(mode)
    return resolve_cipher(cipher).block_size // 8


def key_sizes(cipher: str) -> FrozenSet[int]:
    """Devuelve las longitudes de clave admitidas por el cifrador, en bytes."""

    # AES-512 sólo existe para XTS.
    return frozenset(bits // 8 for bits in resolve_cipher(cipher).key_sizes if bits <= 256)


@lru_cache(maxsize=None)
def check_pair(cipher: str, mode: str) -> None:
    """Comprueba que el backend pueda ejecutar el cifrador en el modo indicado.

    Se construye un cifrador con clave e IV nulos; p. ej. TripleDES y Camellia
    no admiten CTR.

    Raises:
        ValueError: Si el par no está registrado o el backend no lo soporta.

    """

    algorithm = resolve_cipher(cipher)
    key = bytes(max(key_sizes(cipher)))
    iv = bytes(algorithm.block_size // 8)
    try:
        Cipher(algorithm(key), resolve_mode(mode)(iv)).encryptor()
    except UnsupportedAlgorithm as exc:
        raise ValueError(f"{cipher} en modo {mode} no está soportado: {exc}") from exc


def is_padded(mode: str) -> bool:
    """Indica si el modo añade relleno PKCS7 al cifrar."""

    return mode.lower() in PADDED_MODES


class CipherTransform:
    """Transformación incremental de bytes sobre un contexto de `cryptography`.

    Expone la misma interfaz `update`/`finalize` que los contextos de la
    librería; si se indica un `padder`, los datos se rellenan antes de cifrar.

    """

    def __init__(
        self, context: CipherContext, padder: Optional[padding.PaddingContext] = None
    ) -> None:
        self._context = context
        self._padder = padder

    def update(self, data: bytes) -> bytes:
        if self._padder is not None:
            data = self._padder.update(data)
        return self._context.update(data)

    def finalize(self) -> bytes:
        tail = b""
        if self._padder is not None:
            tail = self._context.update(self._padder.finalize())
        return tail + self._context.finalize()


def _build_cipher(cipher: str, mode: str, key: bytes, iv: bytes) -> Cipher:
    algorithm = resolve_cipher(cipher)(key)
    return Cipher(algorithm, resolve_mode(mode)(iv))


def encrypting_transform(cipher: str, mode: str, key: bytes, iv: bytes) -> CipherTransform:
    """Crea la transformación de cifrado con relleno PKCS7 en modos por bloques.

    Args:
        cipher (str): Nombre del cifrador.
        mode (str): Nombre del modo de operación.
        key (bytes): Clave simétrica.
        iv (bytes): Vector de inicialización del tamaño del bloque.

    Returns:
        CipherTransform: Transformación lista para recibir texto en claro.

    Raises:
        ValueError: Si la clave o el IV no tienen un tamaño válido.

    """

    padder = None
    if is_padded(mode):
        padder = padding.PKCS7(block_size(cipher, mode) * 8).padder()
    return CipherTransform(_build_cipher(cipher, mode, key, iv).encryptor(), padder)


def decrypting_transform(cipher: str, mode: str, key: bytes, iv: bytes) -> CipherTransform:
    """Crea la transformación de descifrado.

    El relleno no se elimina aquí: quien consume la transformación decide
    cuántos bytes retirar del final.

    """

    return CipherTransform(_build_cipher(cipher, mode, key, iv).decryptor())
