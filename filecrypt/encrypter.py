# --------------------------------------------------------------
# File: encrypter.py
# Description: Motor de cifrado y descifrado de archivos por bloques en streaming.
# --------------------------------------------------------------
"""Cifrado simétrico de archivos arbitrariamente grandes por bloques fijos.

El cifrado produce dos piezas que el llamador debe mantener asociadas: el
archivo cifrado y un `EncryptedFile` con el IV, el relleno añadido y el
checksum del texto en claro.

Diferencias entre las vías de descifrado:

* `FileEncrypter.decrypt` elimina el relleno del último bloque y verifica el
  checksum; si no coincide borra el archivo generado antes de fallar.
* `FileEncrypter.stream_decrypt` e `FileEncrypter.iter_decrypt` entregan los
  bloques tal como salen del descifrador: el último conserva el relleno y no
  se comprueba el checksum. Una clave o IV incorrectos pasan desapercibidos
  por esta vía.

Si `encrypt` falla, el archivo de destino parcialmente escrito no se borra;
lo mismo ocurre si `decrypt` falla durante la transformación. Sólo el fallo
de checksum elimina la salida.

Una instancia no cambia de configuración tras crearse; `with_key`,
`with_cipher` y `with_mode` devuelven un motor nuevo, por lo que puede
compartirse entre hilos.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterator, Optional, Tuple, Type, Union

from cryptography.exceptions import UnsupportedAlgorithm
from pydantic import ValidationError

from filecrypt.crypto_hash import file_digest, verify_file_digest
from filecrypt.crypto_kdf import derive_key
from filecrypt.crypto_rand import random_bytes
from filecrypt.crypto_sym import CipherTransform, decrypting_transform, encrypting_transform
from filecrypt.exceptions import (
    ConfigError,
    DecryptError,
    EncryptError,
    ErrorKind,
    FileCryptError,
    RandomSourceError,
)
from filecrypt.models import CipherConfig, EncryptedFile
from filecrypt.streams import DecryptionReader, EncryptionWriter

__all__ = ["FileEncrypter"]

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]
ChunkCallback = Callable[[bytes, DecryptionReader], Any]


def _make_config(**values: Any) -> CipherConfig:
    try:
        return CipherConfig(**values)
    except ValidationError as exc:
        raise ConfigError("Configuración de cifrado no válida") from exc


@contextmanager
def _translate_errors(error_cls: Type[FileCryptError], message: str) -> Iterator[None]:
    """Convierte fallos de E/S y del cifrador en `error_cls` con la causa encadenada."""

    try:
        yield
    except FileCryptError:
        raise
    except OSError as exc:
        raise error_cls(message, ErrorKind.IO) from exc
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise error_cls(message, ErrorKind.TRANSFORM) from exc


def _ensure_distinct(source: Path, target: Path) -> None:
    if target.exists() and source.exists() and os.path.samefile(source, target):
        raise OSError(f"El origen y el destino son el mismo archivo: {source}")


class FileEncrypter:
    """Cifra y descifra archivos leyendo y escribiendo bloques de tamaño fijo.

    Args:
        config (CipherConfig): Clave, cifrador, modo y parámetros del flujo.

    """

    def __init__(self, config: CipherConfig) -> None:
        self._config = config

    @classmethod
    def from_key(
        cls, key: Union[bytes, str], cipher: str = "aes", mode: str = "cbc", **options: Any
    ) -> "FileEncrypter":
        """Crea un motor a partir de una clave ya disponible.

        Raises:
            ConfigError: Si el cifrador, el modo o la longitud de clave no son válidos.

        """

        return cls(_make_config(key=key, cipher=cipher, mode=mode, **options))

    @classmethod
    def from_env(cls, key: Union[bytes, str], **overrides: Any) -> "FileEncrypter":
        """Crea un motor con los valores por defecto de `filecrypt.config`."""

        try:
            return cls(CipherConfig.from_env(key, **overrides))
        except ValidationError as exc:
            raise ConfigError("Configuración de cifrado no válida") from exc

    @classmethod
    def from_passphrase(
        cls,
        passphrase: str,
        salt: Optional[bytes] = None,
        cipher: str = "aes",
        mode: str = "cbc",
        *,
        t: int = 3,
        m: int = 64 * 1024,
        p: int = 1,
        **options: Any,
    ) -> Tuple["FileEncrypter", bytes]:
        """Crea un motor con una clave Argon2id derivada de `passphrase`.

        Args:
            passphrase (str): Passphrase del usuario.
            salt (Optional[bytes]): Salt de una derivación previa; si falta se
                genera una nueva.
            cipher (str): Nombre del cifrador.
            mode (str): Modo de operación.
            t (int): Coste temporal de Argon2id.
            m (int): Memoria en KiB de Argon2id.
            p (int): Paralelismo de Argon2id.

        Returns:
            Tuple[FileEncrypter, bytes]: Motor configurado y la salt usada, que
            el llamador debe conservar para volver a descifrar.

        Raises:
            ConfigError: Si el cifrador, el modo o la salt no son válidos.

        """

        derived = derive_key(passphrase, cipher, salt, t=t, m=m, p=p)
        return cls.from_key(derived.key, cipher, mode, **options), derived.salt

    @property
    def config(self) -> CipherConfig:
        return self._config

    @property
    def key(self) -> bytes:
        return self._config.key

    @property
    def cipher(self) -> str:
        return self._config.cipher

    @property
    def mode(self) -> str:
        return self._config.mode

    @property
    def block_size(self) -> int:
        return self._config.block_size

    @property
    def chunk_bytes(self) -> int:
        return self._config.chunk_bytes

    def with_key(self, key: Union[bytes, str]) -> "FileEncrypter":
        """Devuelve un motor igual a este pero con otra clave."""

        return self._reconfigure(key=key)

    def with_cipher(self, cipher: str) -> "FileEncrypter":
        """Devuelve un motor con otro cifrador; el tamaño de bloque se recalcula."""

        return self._reconfigure(cipher=cipher)

    def with_mode(self, mode: str) -> "FileEncrypter":
        """Devuelve un motor con otro modo; el tamaño de bloque se recalcula."""

        return self._reconfigure(mode=mode)

    def _reconfigure(self, **changes: Any) -> "FileEncrypter":
        values = self._config.model_dump()
        values.update(changes)
        return type(self)(_make_config(**values))

    def encrypt(self, source: PathLike, target: PathLike) -> EncryptedFile:
        """Cifra `source` en `target` y devuelve el descriptor del resultado.

        Se genera un IV aleatorio nuevo en cada llamada. El descriptor incluye
        el relleno añadido (tamaño cifrado menos tamaño original) y el
        checksum del archivo original.

        Args:
            source (PathLike): Archivo en claro que se cifrará.
            target (PathLike): Ruta del archivo cifrado; se sobrescribe.

        Returns:
            EncryptedFile: Descriptor con IV, checksum, relleno y ruta cifrada.

        Raises:
            EncryptError: Ante cualquier fallo; el destino parcial no se borra.

        """

        source, target = Path(source), Path(target)
        logger.debug("Cifrando %s -> %s (%s-%s)", source, target, self.cipher, self.mode)

        try:
            iv = random_bytes(self.block_size, allow_weak=self._config.allow_weak_random)
        except RandomSourceError as exc:
            raise EncryptError("No se ha podido generar el IV", ErrorKind.CONFIG) from exc

        with _translate_errors(EncryptError, "No se ha podido cifrar el archivo"):
            self._encrypt_file(source, target, iv)
            padding = self.calculate_padding(source, target)
            checksum = self.checksum(source)

        logger.debug("Cifrado completado: %s (relleno=%d)", target, padding)
        return EncryptedFile.create(iv, checksum, padding, target)

    def decrypt(self, encrypted: EncryptedFile, target: PathLike) -> Path:
        """Descifra el archivo del descriptor en `target` y verifica su checksum.

        Sólo se recortan `encrypted.padding` bytes del último bloque leído.
        Si el checksum del resultado no coincide, `target` se borra.

        Args:
            encrypted (EncryptedFile): Descriptor devuelto por `encrypt`.
            target (PathLike): Ruta del archivo en claro; se sobrescribe.

        Returns:
            Path: La ruta `target`.

        Raises:
            DecryptError: Si falla la lectura, la transformación o el checksum.

        """

        source = self._ciphertext_path(encrypted)
        target = Path(target)
        logger.debug("Descifrando %s -> %s", source, target)

        with _translate_errors(DecryptError, "No se ha podido descifrar el archivo"):
            self._decrypt_file(source, target, encrypted.iv, encrypted.padding)

        with _translate_errors(DecryptError, "No se ha podido verificar el archivo descifrado"):
            valid = self.verify_checksum(target, encrypted.checksum)
            if not valid:
                target.unlink()

        if not valid:
            logger.warning("Checksum no válido al descifrar %s; se elimina %s", source, target)
            raise DecryptError("Checksum no válido en el archivo descifrado", ErrorKind.INTEGRITY)
        return target

    def stream_decrypt(self, encrypted: EncryptedFile, callback: ChunkCallback) -> None:
        """Descifra el archivo invocando `callback(chunk, stream)` por cada bloque.

        El callback recibe los bytes de cada bloque de `chunk_bytes` y el
        `DecryptionReader` subyacente. El relleno no se elimina y el checksum
        no se verifica: si el llamador necesita garantías de integridad debe
        recortar `encrypted.padding` bytes del final y comparar el digest.

        Raises:
            DecryptError: Si el callback no es invocable o falla la lectura.

        """

        if not callable(callback):
            raise DecryptError("El callback debe ser invocable", ErrorKind.CONFIG)

        source, transform = self._prepare_decryption(encrypted)
        with self._open_reader(source, transform) as reader:
            for chunk in self._read_chunks(reader):
                callback(chunk, reader)

    def iter_decrypt(self, encrypted: EncryptedFile) -> Iterator[bytes]:
        """Devuelve un iterador perezoso, finito y no reiniciable de bloques descifrados.

        Tiene el mismo contrato que `stream_decrypt`: sin recorte de relleno
        ni verificación de checksum. La clave y el IV se validan al llamar;
        el archivo cifrado sólo se abre al pedir el primer bloque y se cierra
        al agotar o cerrar el iterador.

        """

        source, transform = self._prepare_decryption(encrypted)
        return self._drain(source, transform)

    def checksum(self, path: PathLike) -> bytes:
        """Digest del archivo con el algoritmo configurado."""

        return file_digest(path, self._config.digest, self.chunk_bytes)

    def verify_checksum(self, path: PathLike, expected: bytes) -> bool:
        """Compara el digest del archivo con `expected`."""

        return verify_file_digest(path, expected, self._config.digest)

    @staticmethod
    def calculate_padding(source: PathLike, target: PathLike) -> int:
        """Bytes que el cifrado ha añadido respecto al archivo original."""

        return os.path.getsize(target) - os.path.getsize(source)

    def _ciphertext_path(self, encrypted: EncryptedFile) -> Path:
        if encrypted.file is None:
            raise DecryptError(
                "El descriptor no referencia ningún archivo cifrado", ErrorKind.DESCRIPTOR
            )
        return encrypted.file

    def _encrypt_file(self, source: Path, target: Path, iv: bytes) -> None:
        _ensure_distinct(source, target)
        transform = encrypting_transform(self.cipher, self.mode, self.key, iv)
        with open(source, "rb") as handler:
            with EncryptionWriter(open(target, "wb"), transform) as writer:
                self._copy_stream(handler, writer)

    def _decrypt_file(self, source: Path, target: Path, iv: bytes, padding: int) -> None:
        _ensure_distinct(source, target)
        transform = decrypting_transform(self.cipher, self.mode, self.key, iv)
        with DecryptionReader(open(source, "rb"), transform, self.chunk_bytes) as reader:
            with open(target, "wb") as handler:
                self._copy_stream(reader, handler, padding)

    def _copy_stream(self, source: Any, target: Any, padding: Optional[int] = None) -> None:
        """Copia `source` en `target` bloque a bloque.

        Se lee un bloque por adelantado para saber cuál es el último; sólo a
        ese se le recortan `padding` bytes.

        """

        chunk = source.read(self.chunk_bytes)
        while chunk:
            following = source.read(self.chunk_bytes)
            if not following and padding:
                chunk = chunk[:-padding]
            target.write(chunk)
            chunk = following

    def _prepare_decryption(self, encrypted: EncryptedFile) -> Tuple[Path, CipherTransform]:
        source = self._ciphertext_path(encrypted)
        with _translate_errors(DecryptError, "No se ha podido preparar el descifrado"):
            transform = decrypting_transform(self.cipher, self.mode, self.key, encrypted.iv)
        return source, transform

    def _open_reader(self, source: Path, transform: CipherTransform) -> DecryptionReader:
        with _translate_errors(DecryptError, "No se ha podido abrir el archivo cifrado"):
            handler: BinaryIO = open(source, "rb")
        return DecryptionReader(handler, transform, self.chunk_bytes)

    def _read_chunks(self, reader: DecryptionReader) -> Iterator[bytes]:
        while True:
            with _translate_errors(DecryptError, "No se ha podido descifrar el archivo"):
                chunk = reader.read(self.chunk_bytes)
            if not chunk:
                return
            yield chunk

    def _drain(self, source: Path, transform: CipherTransform) -> Iterator[bytes]:
        with self._open_reader(source, transform) as reader:
            yield from self._read_chunks(reader)
