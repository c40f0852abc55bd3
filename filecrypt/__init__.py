# --------------------------------------------------------------
# File: __init__.py
# Description: Exposición pública del motor de cifrado de archivos por bloques.
# --------------------------------------------------------------
"""Inicializa el paquete `filecrypt` y expone sus tipos principales."""

from filecrypt.encrypter import FileEncrypter
from filecrypt.exceptions import (
    ConfigError,
    DecryptError,
    DescriptorError,
    EncryptError,
    ErrorKind,
    FileCryptError,
    RandomSourceError,
)
from filecrypt.models import CipherConfig, EncryptedFile

__all__ = [
    "CipherConfig",
    "ConfigError",
    "DecryptError",
    "DescriptorError",
    "EncryptError",
    "EncryptedFile",
    "ErrorKind",
    "FileCryptError",
    "FileEncrypter",
    "RandomSourceError",
]
