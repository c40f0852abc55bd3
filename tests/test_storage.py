# --------------------------------------------------------------
# File: test_storage.py
# Description: Pruebas sobre la persistencia JSON de descriptores en filecrypt.storage.
# --------------------------------------------------------------

import json

import pytest

from filecrypt import config
from filecrypt.exceptions import DescriptorError
from filecrypt.models import EncryptedFile
from filecrypt.storage import (
    fetch_descriptor,
    load_manifest,
    remove_descriptor,
    save_manifest,
    store_descriptor,
)


@pytest.fixture
def descriptor(tmp_path):
    """Descriptor que referencia un archivo cifrado ficticio."""
    path = tmp_path / "report.enc"
    path.write_bytes(b"\x00" * 32)
    return EncryptedFile.create(b"\x01" * 16, b"\x02" * 20, 16, path)


def test_load_manifest_creates_when_missing(tmp_path):
    """Comprueba que load_manifest genere la estructura base cuando no existe archivo.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones validan la estructura creada en memoria.
    """
    path = tmp_path / "manifest.json"
    manifest = load_manifest(str(path))
    assert manifest == {"files": {}}
    assert not path.exists()


def test_save_manifest_is_atomic(tmp_path):
    """Garantiza que el guardado se realice de forma atómica sin archivos residuales.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones comprueban la presencia y ausencia de archivos esperada.
    """
    path = tmp_path / "nested" / "manifest.json"
    data = {"files": {"a": {"padding": 1}}}
    save_manifest(data, str(path))
    assert path.exists()
    assert not (tmp_path / "nested" / "manifest.json.tmp").exists()
    assert load_manifest(str(path)) == data


def test_load_manifest_with_corrupt_json(tmp_path):
    """Valida que un JSON corrupto o con otra forma se trate como manifiesto vacío.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones confirman la recuperación ante corrupción.
    """
    path = tmp_path / "manifest.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_manifest(str(path)) == {"files": {}}
    path.write_text(json.dumps(["x"]), encoding="utf-8")
    assert load_manifest(str(path)) == {"files": {}}


def test_store_and_fetch_descriptor(descriptor):
    """Comprueba que un descriptor guardado se recupere idéntico.

    Returns:
        None: Las aserciones comparan ambos descriptores.
    """
    store_descriptor("report", descriptor, config.MANIFEST_PATH)
    assert fetch_descriptor("report", config.MANIFEST_PATH) == descriptor


def test_fetch_unknown_or_orphaned_descriptor(descriptor):
    """Garantiza que nombres desconocidos o archivos borrados produzcan DescriptorError.

    Returns:
        None: Se esperan DescriptorError.
    """
    with pytest.raises(DescriptorError):
        fetch_descriptor("missing", config.MANIFEST_PATH)

    store_descriptor("report", descriptor, config.MANIFEST_PATH)
    descriptor.file.unlink()
    with pytest.raises(DescriptorError):
        fetch_descriptor("report", config.MANIFEST_PATH)


def test_remove_descriptor(descriptor):
    """Verifica que eliminar un descriptor no toque el archivo cifrado.

    Returns:
        None: Las aserciones evalúan manifiesto y archivo.
    """
    store_descriptor("report", descriptor, config.MANIFEST_PATH)
    assert remove_descriptor("report", config.MANIFEST_PATH)
    assert not remove_descriptor("report", config.MANIFEST_PATH)
    assert load_manifest(config.MANIFEST_PATH) == {"files": {}}
    assert descriptor.file.exists()


def test_default_manifest_follows_storage_path(descriptor, tmp_path):
    """Comprueba que sin ruta explícita se use el manifiesto bajo STORAGE_PATH.

    Args:
        descriptor (EncryptedFile): Descriptor de prueba.
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones revisan el archivo escrito en `config.MANIFEST_PATH`.
    """
    store_descriptor("report", descriptor)
    manifest_path = tmp_path / "_data" / "manifest.json"
    assert config.MANIFEST_PATH == str(manifest_path)
    assert "report" in json.loads(manifest_path.read_text(encoding="utf-8"))["files"]
    assert fetch_descriptor("report") == descriptor
    assert remove_descriptor("report")
    assert load_manifest() == {"files": {}}
