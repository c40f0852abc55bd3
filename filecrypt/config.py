import os
from dotenv import load_dotenv
load_dotenv()

DEFAULT_CIPHER = os.getenv("FILECRYPT_CIPHER", "aes").lower()
DEFAULT_MODE = os.getenv("FILECRYPT_MODE", "cbc").lower()
DEFAULT_DIGEST = os.getenv("FILECRYPT_DIGEST", "sha1").lower()
CHUNK_BYTES = int(os.getenv("FILECRYPT_CHUNK_BYTES", "8192"))

DATA_DIR = os.getenv("STORAGE_PATH", "./_data")
MANIFEST_PATH = os.path.join(DATA_DIR, "manifest.json")
