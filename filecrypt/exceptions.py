# --------------------------------------------------------------
# File: exceptions.py
# Description: Jerarquía de errores etiquetados del cifrado de archivos.
# --------------------------------------------------------------
"""Errores del paquete con categoría explícita y causa encadenada."""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = [
    "ConfigError",
    "DecryptError",
    "DecryptException",
    "DescriptorError",
    "EncryptError",
    "EncryptException",
    "ErrorKind",
    "FileCryptError",
    "RandomSourceError",
]


class ErrorKind(str, Enum):
    """Categoría del fallo para distinguirlo sin analizar el mensaje."""

    IO = "io"
    TRANSFORM = "transform"
    INTEGRITY = "integrity"
    CONFIG = "config"
    DESCRIPTOR = "descriptor"


class FileCryptError(Exception):
    """Error base del paquete.

    La excepción de bajo nivel que provocó el fallo se conserva en
    `__cause__` (``raise ... from exc``) y se expone mediante `cause`.

    Attributes:
        kind (ErrorKind): Categoría del fallo.

    """

    default_kind = ErrorKind.CONFIG

    def __init__(self, message: str, kind: Optional[ErrorKind] = None) -> None:
        super().__init__(message)
        self.kind = kind or self.default_kind

    @property
    def cause(self) -> Optional[BaseException]:
        """Devuelve la excepción original encadenada, si existe."""

        return self.__cause__

    def __str__(self) -> str:
        message = super().__str__()
        if self.__cause__ is not None:
            return f"{message} [{self.kind.value}]: {self.__cause__}"
        return f"{message} [{self.kind.value}]"


class EncryptError(FileCryptError):
    """Fallo durante el cifrado: origen ilegible, transformación o escritura."""

    default_kind = ErrorKind.TRANSFORM


class DecryptError(FileCryptError):
    """Fallo durante el descifrado o si el checksum final no coincide."""

    default_kind = ErrorKind.TRANSFORM


class DescriptorError(FileCryptError, ValueError):
    """Descriptor inválido, por ejemplo si referencia un archivo inexistente."""

    default_kind = ErrorKind.DESCRIPTOR


class ConfigError(FileCryptError, ValueError):
    """Configuración de cifrado no válida (cifrador, modo, clave o digest)."""

    default_kind = ErrorKind.CONFIG


class RandomSourceError(FileCryptError):
    """No hay ninguna fuente de aleatoriedad fuerte disponible."""

    default_kind = ErrorKind.CONFIG


# Nombres históricos de la API original.
EncryptException = EncryptError
DecryptException = DecryptError
