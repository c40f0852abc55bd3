# --------------------------------------------------------------
# File: test_config.py
# Description: Pruebas de la lectura de variables de entorno de filecrypt.config.
# --------------------------------------------------------------

import importlib
import os

import filecrypt.config as config_module


def test_defaults_without_environment():
    """Comprueba los valores por defecto cuando no hay variables definidas.

    Returns:
        None: Las aserciones evalúan las constantes del módulo.
    """
    assert config_module.DEFAULT_CIPHER == "aes"
    assert config_module.DEFAULT_MODE == "cbc"
    assert config_module.DEFAULT_DIGEST == "sha1"
    assert config_module.CHUNK_BYTES == 8192


def test_environment_overrides(monkeypatch, tmp_path):
    """Verifica que las variables de entorno sustituyan los valores por defecto.

    Args:
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones evalúan las constantes recargadas.
    """
    monkeypatch.setenv("FILECRYPT_CIPHER", "Camellia")
    monkeypatch.setenv("FILECRYPT_CHUNK_BYTES", "4096")
    monkeypatch.setenv("STORAGE_PATH", str(tmp_path))
    importlib.reload(config_module)

    assert config_module.DEFAULT_CIPHER == "camellia"
    assert config_module.CHUNK_BYTES == 4096
    assert config_module.MANIFEST_PATH == os.path.join(str(tmp_path), "manifest.json")
