# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos del cifrado de archivos: configuración y descriptor.
# --------------------------------------------------------------
"""Modelos Pydantic que describen la configuración y los archivos cifrados."""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from filecrypt import config
from filecrypt.crypto_hash import ensure_algorithm
from filecrypt.crypto_sym import block_size, check_pair, key_sizes, resolve_cipher, resolve_mode
from filecrypt.exceptions import DescriptorError

__all__ = ["CipherConfig", "EncryptedFile"]


def _b64u(data: bytes) -> str:
    """Codifica datos binarios en Base64 URL-safe sin relleno."""

    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64u(value: str) -> bytes:
    """Decodifica datos codificados en Base64 URL-safe gestionando el relleno."""

    pad = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + pad)


class CipherConfig(BaseModel):
    """Configuración inmutable de un motor de cifrado.

    Para cambiar la clave, el cifrador o el modo se construye una
    configuración nueva; el tamaño de bloque se deriva siempre del par
    cifrador/modo.

    Attributes:
        key (bytes): Clave simétrica; su longitud debe admitirla el cifrador.
        cipher (str): Nombre del cifrador por bloques (``aes``, ``camellia``...).
        mode (str): Modo de operación (``cbc``, ``cfb``, ``ofb``, ``ctr``).
        digest (str): Algoritmo de `hashlib` para el checksum del texto en claro.
        chunk_bytes (int): Bytes leídos en cada iteración del flujo.
        allow_weak_random (bool): Permite un IV no criptográfico si no hay
            ninguna fuente fuerte disponible.

    """

    model_config = ConfigDict(frozen=True)

    key: bytes = Field(repr=False)
    cipher: str = "aes"
    mode: str = "cbc"
    digest: str = "sha1"
    chunk_bytes: int = Field(default=8192, gt=0)
    allow_weak_random: bool = False

    @field_validator("cipher")
    @classmethod
    def _check_cipher(cls, value: str) -> str:
        resolve_cipher(value)
        return value.lower()

    @field_validator("mode")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        resolve_mode(value)
        return value.lower()

    @field_validator("digest")
    @classmethod
    def _check_digest(cls, value: str) -> str:
        return ensure_algorithm(value)

    @model_validator(mode="after")
    def _check_key(self) -> "CipherConfig":
        allowed = key_sizes(self.cipher)
        if len(self.key) not in allowed:
            sizes = ", ".join(str(size) for size in sorted(allowed))
            raise ValueError(
                f"Clave de {len(self.key)} bytes no válida para {self.cipher}; se admiten: {sizes}"
            )
        return self

    @model_validator(mode="after")
    def _check_pair(self) -> "CipherConfig":
        check_pair(self.cipher, self.mode)
        return self

    @property
    def block_size(self) -> int:
        """Tamaño de bloque (y de IV) en bytes para el cifrador y modo actuales."""

        return block_size(self.cipher, self.mode)

    @classmethod
    def from_env(cls, key: bytes, **overrides: Any) -> "CipherConfig":
        """Construye la configuración con los valores por defecto del entorno."""

        values: Dict[str, Any] = {
            "key": key,
            "cipher": config.DEFAULT_CIPHER,
            "mode": config.DEFAULT_MODE,
            "digest": config.DEFAULT_DIGEST,
            "chunk_bytes": config.CHUNK_BYTES,
        }
        values.update(overrides)
        return cls(**values)


class EncryptedFile(BaseModel):
    """Describe un archivo cifrado y lo necesario para descifrarlo.

    El descriptor no gestiona el ciclo de vida del archivo cifrado, sólo lo
    referencia. `file` es ``None`` cuando el descriptor no apunta a ningún
    archivo; si se indica, debe existir y se guarda como ruta absoluta.

    Attributes:
        iv (bytes): Vector de inicialización usado en el cifrado.
        checksum (bytes): Digest del texto en claro original.
        padding (int): Bytes de relleno añadidos por el cifrador.
        file (Optional[Path]): Ruta absoluta del archivo cifrado.

    """

    model_config = ConfigDict(frozen=True)

    iv: bytes
    checksum: bytes
    padding: int = Field(default=0, ge=0)
    file: Optional[Path] = None

    @field_validator("file")
    @classmethod
    def _resolve_file(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        if not value.is_file():
            raise ValueError(f"El archivo cifrado no existe: {value}")
        return value.resolve()

    @classmethod
    def create(cls, iv: bytes, checksum: bytes, padding: int, file: Any) -> "EncryptedFile":
        """Crea el descriptor validando que el archivo referenciado exista.

        Args:
            iv (bytes): Vector de inicialización.
            checksum (bytes): Digest del archivo original.
            padding (int): Relleno añadido durante el cifrado.
            file (Any): Ruta (``str`` o ``Path``) del archivo cifrado o ``None``.

        Returns:
            EncryptedFile: Descriptor inmutable.

        Raises:
            DescriptorError: Si algún campo no es válido o el archivo no existe.

        """

        try:
            return cls(iv=iv, checksum=checksum, padding=padding, file=file)
        except ValidationError as exc:
            raise DescriptorError("Descriptor de archivo cifrado no válido") from exc

    @property
    def has_file(self) -> bool:
        return self.file is not None

    @property
    def checksum_hex(self) -> str:
        return self.checksum.hex()

    def to_dict(self) -> Dict[str, Any]:
        """Representación serializable con los binarios en Base64 URL-safe."""

        return {
            "iv": _b64u(self.iv),
            "checksum": _b64u(self.checksum),
            "padding": self.padding,
            "file": str(self.file) if self.file is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptedFile":
        """Reconstruye el descriptor; falla si el archivo referenciado no existe."""

        try:
            iv = _unb64u(data["iv"])
            checksum = _unb64u(data["checksum"])
            padding = data.get("padding", 0)
            file = data.get("file")
        except (KeyError, TypeError, binascii.Error) as exc:
            raise DescriptorError("Registro de descriptor incompleto o corrupto") from exc
        return cls.create(iv, checksum, padding, file)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, payload: str) -> "EncryptedFile":
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise DescriptorError("Descriptor JSON no válido") from exc
        if not isinstance(data, dict):
            raise DescriptorError("El descriptor JSON debe ser un objeto")
        return cls.from_dict(data)

    def __reduce__(self):
        # Al deserializar se vuelve a comprobar que el archivo exista.
        return _restore_encrypted_file, (self.to_dict(),)


def _restore_encrypted_file(data: Dict[str, Any]) -> EncryptedFile:
    return EncryptedFile.from_dict(data)
