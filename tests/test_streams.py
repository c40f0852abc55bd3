# --------------------------------------------------------------
# File: test_streams.py
# Description: Pruebas de los flujos que cifran al escribir y descifran al leer.
# --------------------------------------------------------------

import io
import os

import pytest

from filecrypt.crypto_sym import decrypting_transform, encrypting_transform
from filecrypt.streams import DecryptionReader, EncryptionWriter


class _Sink(io.BytesIO):
    """BytesIO que conserva su contenido tras cerrarse."""

    def close(self):
        self.final = self.getvalue()
        super().close()


def _encrypt(key, iv, data):
    sink = _Sink()
    with EncryptionWriter(sink, encrypting_transform("aes", "cbc", key, iv)) as writer:
        for start in range(0, len(data), 7):
            writer.write(data[start : start + 7])
    return sink.final


def test_writer_flushes_padding_on_close():
    """Comprueba que el bloque final con relleno se emita al cerrar.

    Returns:
        None: Las aserciones evalúan la longitud y el estado del flujo.
    """
    key, iv = os.urandom(32), os.urandom(16)
    sink = _Sink()
    writer = EncryptionWriter(sink, encrypting_transform("aes", "cbc", key, iv))
    writer.write(b"a" * 20)
    writer.close()
    assert len(sink.final) == 32
    assert writer.closed
    with pytest.raises(ValueError):
        writer.write(b"x")


def test_writer_does_not_finalize_on_error():
    """Verifica que ante una excepción no se escriba el bloque final.

    Returns:
        None: Las aserciones evalúan el contenido parcial.
    """
    sink = _Sink()
    with pytest.raises(RuntimeError):
        with EncryptionWriter(sink, encrypting_transform("aes", "cbc", os.urandom(32), os.urandom(16))) as writer:
            writer.write(b"b" * 20)
            raise RuntimeError("fallo")
    assert len(sink.final) == 16
    assert sink.closed


def test_reader_returns_exact_sizes_until_exhausted():
    """Comprueba que read(n) entregue n bytes salvo al final del flujo.

    Returns:
        None: Las aserciones evalúan tamaños, posición y fin de flujo.
    """
    key, iv = os.urandom(32), os.urandom(16)
    data = os.urandom(100)
    ciphertext = _encrypt(key, iv, data)

    reader = DecryptionReader(io.BytesIO(ciphertext), decrypting_transform("aes", "cbc", key, iv), 5)
    assert reader.read(30) == data[:30]
    assert reader.tell() == 30
    assert not reader.eof
    rest = reader.read()
    assert rest[:70] == data[30:]
    assert len(rest) == 82  # 70 bytes + 12 de relleno
    assert reader.eof
    assert reader.read(10) == b""
    reader.close()
    assert reader.closed
