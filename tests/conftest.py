# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para aislar el almacenamiento y preparar archivos.
# --------------------------------------------------------------

import importlib
from typing import Iterator

import pytest

from filecrypt.encrypter import FileEncrypter

DEFAULT_KEY = b"2ApWknyPwb4N8Hhv4zT34FvubrCTx0Sh"


@pytest.fixture(autouse=True)
def _isolate_storage(tmp_path, monkeypatch) -> Iterator[None]:
    """Aísla STORAGE_PATH y recarga filecrypt.config para cada prueba.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    data_dir = tmp_path / "_data"
    data_dir.mkdir()
    monkeypatch.setenv("STORAGE_PATH", str(data_dir))
    for name in ("FILECRYPT_CIPHER", "FILECRYPT_MODE", "FILECRYPT_DIGEST", "FILECRYPT_CHUNK_BYTES"):
        monkeypatch.delenv(name, raising=False)

    import filecrypt.config as config_module

    importlib.reload(config_module)

    yield
    # tmp_path se limpia automáticamente por pytest


@pytest.fixture
def encrypter() -> FileEncrypter:
    """Motor AES-256-CBC con la clave de pruebas."""
    return FileEncrypter.from_key(DEFAULT_KEY)


@pytest.fixture
def plain_file(tmp_path):
    """Archivo JSON pequeño que sirve como texto en claro."""
    path = tmp_path / "test.json"
    path.write_bytes(b'{"unit": "test"}')
    return path
