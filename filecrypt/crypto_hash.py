# --------------------------------------------------------------
# File: crypto_hash.py
# Description: Checksums de archivos para verificar la integridad del descifrado.
# --------------------------------------------------------------
"""Cálculo y comprobación de digests de archivos leídos por bloques."""

from __future__ import annotations

import hashlib
import os
from typing import Union

__all__ = ["digest_size", "ensure_algorithm", "file_digest", "verify_file_digest"]

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_ALGORITHM = "sha1"


def ensure_algorithm(name: str) -> str:
    """Normaliza el nombre del algoritmo y comprueba que `hashlib` lo ofrece.

    Raises:
        ValueError: Si el algoritmo no está disponible o no tiene longitud fija.

    """

    normalized = name.lower()
    if normalized not in hashlib.algorithms_available:
        raise ValueError(f"Algoritmo de digest no disponible: {name!r}")
    if hashlib.new(normalized).digest_size == 0:
        raise ValueError(f"El digest {name!r} no tiene longitud fija")
    return normalized


def digest_size(algorithm: str = DEFAULT_ALGORITHM) -> int:
    """Longitud en bytes del digest producido por `algorithm`."""

    return hashlib.new(ensure_algorithm(algorithm)).digest_size


def file_digest(
    path: PathLike, algorithm: str = DEFAULT_ALGORITHM, chunk_bytes: int = 8192
) -> bytes:
    """Calcula el digest de un archivo sin cargarlo entero en memoria.

    Args:
        path (PathLike): Ruta del archivo.
        algorithm (str): Nombre del algoritmo de `hashlib`.
        chunk_bytes (int): Tamaño de cada lectura.

    Returns:
        bytes: Digest binario de longitud fija.

    """

    hasher = hashlib.new(ensure_algorithm(algorithm))
    with open(path, "rb") as handler:
        for chunk in iter(lambda: handler.read(chunk_bytes), b""):
            hasher.update(chunk)
    return hasher.digest()


def verify_file_digest(
    path: PathLike, expected: bytes, algorithm: str = DEFAULT_ALGORITHM
) -> bool:
    """Compara el digest del archivo con `expected` byte a byte."""

    # TODO: usar hmac.compare_digest si el checksum llega a proteger secretos.
    return file_digest(path, algorithm) == expected
