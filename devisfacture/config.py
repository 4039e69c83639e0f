from __future__ import annotations
import logging
import os
from pathlib import Path

# --- Chemins de base ---
ROOT_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.environ.get("DEVISFACTURE_DATA_DIR") or (ROOT_DIR / "data"))

DOCUMENTS_JSON = DATA_DIR / "documents.json"
CLIENTS_JSON = DATA_DIR / "clients.json"
SUPPLIERS_JSON = DATA_DIR / "suppliers.json"
SETTINGS_JSON = DATA_DIR / "settings.json"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def data_path(default: Path, data_dir: os.PathLike | str | None = None) -> Path:
    """Chemin par défaut d'une collection JSON, ou même nom de fichier dans `data_dir`."""
    return Path(data_dir) / default.name if data_dir else default


def configure_logging(level: str | None = None) -> None:
    level = (level or os.environ.get("DEVISFACTURE_LOG_LEVEL") or "INFO").upper()
    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        for handler in root.handlers:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
