# --------------------------------------------------------------
# File: crypto_rand.py
# Description: Selección de la fuente de aleatoriedad para generar IVs.
# --------------------------------------------------------------
"""Generación de bytes aleatorios con fuentes fuertes ordenadas por prioridad."""

from __future__ import annotations

import logging
import os
import random
import secrets
from typing import Callable, Optional, Sequence, Tuple

from filecrypt.exceptions import RandomSourceError

__all__ = ["STRONG_SOURCES", "random_bytes"]

logger = logging.getLogger(__name__)

RandomSource = Callable[[int], bytes]

# Fuentes criptográficamente seguras, de mayor a menor preferencia.
STRONG_SOURCES: Tuple[Tuple[str, RandomSource], ...] = (
    ("os.urandom", os.urandom),
    ("secrets.token_bytes", secrets.token_bytes),
)


def _weak_bytes(length: int) -> bytes:
    return random.Random().randbytes(length)


def random_bytes(
    length: int,
    *,
    allow_weak: bool = False,
    sources: Optional[Sequence[Tuple[str, RandomSource]]] = None,
) -> bytes:
    """Genera `length` bytes aleatorios con la primera fuente fuerte disponible.

    Una fuente que lanza `NotImplementedError` u `OSError` se descarta y se
    prueba la siguiente. El generador pseudoaleatorio de `random` sólo se usa
    si `allow_weak` lo autoriza explícitamente.

    Args:
        length (int): Número de bytes solicitados.
        allow_weak (bool): Permite recurrir a una fuente no criptográfica.
        sources (Optional[Sequence[Tuple[str, RandomSource]]]): Lista de
            fuentes a probar en orden; por defecto `STRONG_SOURCES`.

    Returns:
        bytes: Bytes aleatorios de la longitud pedida.

    Raises:
        RandomSourceError: Si ninguna fuente fuerte responde y no se permite
        la alternativa débil.

    """

    for name, source in STRONG_SOURCES if sources is None else sources:
        try:
            data = source(length)
        except (NotImplementedError, OSError) as exc:
            logger.debug("Fuente aleatoria %s no disponible: %s", name, exc)
            continue
        if len(data) == length:
            return data
        logger.debug("Fuente aleatoria %s devolvió %d bytes", name, len(data))

    if allow_weak:
        logger.warning("Sin fuente aleatoria fuerte; se usa el generador de random")
        return _weak_bytes(length)
    raise RandomSourceError("No hay ninguna fuente de aleatoriedad fuerte disponible")
