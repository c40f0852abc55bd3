# --------------------------------------------------------------
# File: streams.py
# Description: Flujos de archivo que cifran al escribir y descifran al leer.
# --------------------------------------------------------------
"""Envoltorios de archivo que aplican una `CipherTransform` por bloques."""

from __future__ import annotations

from typing import BinaryIO

from filecrypt.crypto_sym import CipherTransform

__all__ = ["DecryptionReader", "EncryptionWriter"]


class EncryptionWriter:
    """Escribe en `target` el resultado de cifrar los bytes recibidos.

    El último bloque (con el relleno) sólo se emite al cerrar el flujo, por lo
    que el tamaño del archivo cifrado no es definitivo hasta `close()`.

    """

    def __init__(self, target: BinaryIO, transform: CipherTransform) -> None:
        self._target = target
        self._transform = transform
        self._closed = False

    @property
    def name(self) -> str:
        return str(getattr(self._target, "name", ""))

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ValueError("Escritura sobre un flujo cerrado")
        self._target.write(self._transform.update(data))
        return len(data)

    def close(self) -> None:
        """Vacía el bloque final y cierra el archivo subyacente."""

        if self._closed:
            return
        self._closed = True
        try:
            self._target.write(self._transform.finalize())
        finally:
            self._target.close()

    def __enter__(self) -> "EncryptionWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            # Ante un error no se intenta emitir el bloque final.
            self._closed = True
            self._target.close()


class DecryptionReader:
    """Lee `source` devolviendo texto en claro descifrado.

    `read(size)` entrega exactamente `size` bytes salvo cuando el archivo
    cifrado se ha agotado. El relleno del cifrador no se elimina.

    """

    def __init__(
        self, source: BinaryIO, transform: CipherTransform, chunk_bytes: int = 8192
    ) -> None:
        self._source = source
        self._transform = transform
        self._chunk_bytes = chunk_bytes
        self._buffer = bytearray()
        self._exhausted = False
        self._position = 0

    @property
    def name(self) -> str:
        return str(getattr(self._source, "name", ""))

    @property
    def closed(self) -> bool:
        return self._source.closed

    @property
    def eof(self) -> bool:
        """True cuando no quedan bytes descifrados por entregar."""

        return self._exhausted and not self._buffer

    def tell(self) -> int:
        """Bytes en claro entregados hasta el momento."""

        return self._position

    def _fill(self, size: int) -> None:
        while len(self._buffer) < size and not self._exhausted:
            raw = self._source.read(self._chunk_bytes)
            if raw:
                self._buffer += self._transform.update(raw)
            else:
                self._buffer += self._transform.finalize()
                self._exhausted = True

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            while not self._exhausted:
                self._fill(len(self._buffer) + self._chunk_bytes)
            size = len(self._buffer)
        else:
            self._fill(size)
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        self._position += len(data)
        return data

    def close(self) -> None:
        self._source.close()

    def __enter__(self) -> "DecryptionReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
