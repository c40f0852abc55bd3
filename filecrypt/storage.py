# --------------------------------------------------------------
# File: storage.py
# Description: Persistencia en JSON de los descriptores de archivos cifrados.
# --------------------------------------------------------------
"""Funciones auxiliares de entrada/salida para el manifiesto de descriptores."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from filecrypt import config
from filecrypt.exceptions import DescriptorError
from filecrypt.models import EncryptedFile

__all__ = [
    "fetch_descriptor",
    "load_manifest",
    "remove_descriptor",
    "save_manifest",
    "store_descriptor",
]

logger = logging.getLogger(__name__)


def _ensure_parent_dir(path: str) -> None:
    """Garantiza que exista el directorio padre del archivo de destino."""

    parent = os.path.dirname(path) or "."
    os.makedirs(parent, exist_ok=True)


def _manifest_path(path: Optional[str]) -> str:
    # Se lee en cada llamada para respetar STORAGE_PATH recargado.
    return config.MANIFEST_PATH if path is None else path


def load_manifest(path: Optional[str] = None) -> Dict[str, Any]:
    """Carga el manifiesto JSON y devuelve un diccionario seguro para uso interno.

    Args:
        path (Optional[str]): Ruta del manifiesto; por defecto `config.MANIFEST_PATH`.

    Returns:
        Dict[str, Any]: Estructura cargada o el manifiesto vacío si no es accesible.

    """

    path = _manifest_path(path)
    try:
        with open(path, "r", encoding="utf-8") as handler:
            data = json.load(handler)
    except (FileNotFoundError, json.JSONDecodeError):
        return {"files": {}}
    if not isinstance(data, dict) or not isinstance(data.get("files"), dict):
        logger.warning("Manifiesto con estructura inesperada en %s", path)
        return {"files": {}}
    return data


def save_manifest(manifest: Dict[str, Any], path: Optional[str] = None) -> None:
    """Guarda el manifiesto JSON aplicando escritura atómica."""

    path = _manifest_path(path)
    _ensure_parent_dir(path)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as handler:
        json.dump(manifest, handler, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


def store_descriptor(name: str, descriptor: EncryptedFile, path: Optional[str] = None) -> None:
    """Registra (o reemplaza) el descriptor `name` en el manifiesto."""

    manifest = load_manifest(path)
    manifest.setdefault("files", {})[name] = descriptor.to_dict()
    save_manifest(manifest, path)


def fetch_descriptor(name: str, path: Optional[str] = None) -> EncryptedFile:
    """Recupera el descriptor `name` del manifiesto.

    Raises:
        DescriptorError: Si no existe o si su archivo cifrado ya no está.

    """

    record = load_manifest(path)["files"].get(name)
    if record is None:
        raise DescriptorError(f"No hay ningún descriptor registrado como {name!r}")
    return EncryptedFile.from_dict(record)


def remove_descriptor(name: str, path: Optional[str] = None) -> bool:
    """Elimina el descriptor del manifiesto; no borra el archivo cifrado."""

    manifest = load_manifest(path)
    if manifest["files"].pop(name, None) is None:
        return False
    save_manifest(manifest, path)
    return True
