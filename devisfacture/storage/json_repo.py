from __future__ import annotations

import glob
import json
import logging
import shutil
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel

from devisfacture.models.common import Record, gen_id

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def _json_default(o: Any) -> Any:
    if isinstance(o, (date, datetime)):
        return o.isoformat()
    return str(o)


def load_json(path: Union[str, Path]) -> Any:
    """Lit un fichier JSON ; None si absent ou illisible."""
    p = Path(path)
    if not p.exists():
        return None
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Lecture impossible de %s (%s)", p, e)
        return None


def dump_json(path: Union[str, Path], data: Any) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, ensure_ascii=False, indent=2, default=_json_default), encoding="utf-8")


class JsonRepository:
    """
    Collection JSON (liste d'objets) avec clé primaire configurable.
    - Rotation de backups (backup_enabled, backup_keep)
    - N'écrit pas si le contenu ne change pas
    - Fichier corrompu -> copié en .corrupt.json, lu comme liste vide
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        entity_name: str = "entity",
        key: str = "id",
        *,
        backup_enabled: bool = True,
        backup_keep: int = 5,
    ) -> None:
        self.filepath = Path(filepath)
        self.entity_name = entity_name
        self.key = key
        self._lock = threading.Lock()
        self.backup_enabled = backup_enabled
        self.backup_keep = max(0, int(backup_keep))

        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        if not self.filepath.exists():
            self._write_raw([])

    # ---------------- I/O bas niveau ---------------- #

    def _read_raw(self) -> List[Row]:
        try:
            with self.filepath.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError:
            backup = self.filepath.with_suffix(".corrupt.json")
            logger.warning("%s corrompu, copie dans %s", self.filepath, backup)
            try:
                shutil.copy2(self.filepath, backup)
            except OSError as e:
                logger.warning("Copie de %s impossible: %s", self.filepath, e)
            return []
        return [d for d in data if isinstance(d, dict)] if isinstance(data, list) else []

    def _rotate_backups(self) -> None:
        if not self.backup_enabled or self.backup_keep <= 0:
            return
        pattern = str(self.filepath.with_suffix(".*.bak.json"))
        files = sorted(glob.glob(pattern))
        # garde les plus récents
        for old in files[: max(0, len(files) - self.backup_keep)]:
            Path(old).unlink(missing_ok=True)

    def _write_raw(self, data: Iterable[Mapping[str, Any]]) -> None:
        with self._lock:
            new_dump = json.dumps(list(data), ensure_ascii=False, indent=2, default=_json_default)

            if self.filepath.exists():
                try:
                    if self.filepath.read_text(encoding="utf-8") == new_dump:
                        return
                except OSError:
                    pass

                if self.backup_enabled:
                    ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
                    backup = self.filepath.with_suffix(f".{ts}.bak.json")
                    shutil.copy2(self.filepath, backup)
                    self._rotate_backups()

            self.filepath.write_text(new_dump, encoding="utf-8")

    # ---------------- Helpers ---------------- #

    @staticmethod
    def _to_dict(item: Union[BaseModel, Mapping[str, Any]]) -> Row:
        if isinstance(item, Record):
            return item.to_json_dict()
        if isinstance(item, BaseModel):
            return item.model_dump(mode="json")
        return dict(item)

    def _same_key(self, row: Mapping[str, Any], key_value: Any) -> bool:
        return str(row.get(self.key)) == str(key_value)

    # ---------------- CRUD ---------------- #

    def list_all(self) -> List[Row]:
        return self._read_raw()

    def get_by_id(self, obj_id: Any) -> Optional[Row]:
        for row in self._read_raw():
            if self._same_key(row, obj_id):
                return row
        return None

    def add(self, item: Union[BaseModel, Mapping[str, Any]]) -> Row:
        record = self._to_dict(item)
        k = self.key
        if not record.get(k):
            record[k] = gen_id()
        data = self._read_raw()
        if any(self._same_key(d, record[k]) for d in data):
            raise ValueError(f"{self.entity_name} with {k}={record[k]} already exists")
        data.append(record)
        self._write_raw(data)
        return record

    def update(self, item: Union[BaseModel, Mapping[str, Any]]) -> Row:
        record = self._to_dict(item)
        k = self.key
        obj_id = record.get(k)
        if not obj_id:
            raise ValueError(f"Cannot update {self.entity_name} without '{k}'")
        data = self._read_raw()
        for idx, existing in enumerate(data):
            if self._same_key(existing, obj_id):
                # remplacement complet : un champ absent reste absent
                data[idx] = record
                self._write_raw(data)
                return record
        raise ValueError(f"{self.entity_name} with {k}={obj_id} not found")

    def upsert(self, item: Union[BaseModel, Mapping[str, Any]]) -> Row:
        record = self._to_dict(item)
        if record.get(self.key) and self.get_by_id(record[self.key]) is not None:
            return self.update(record)
        return self.add(record)

    def delete(self, obj_id: Any) -> bool:
        data = self._read_raw()
        new_data = [d for d in data if not self._same_key(d, obj_id)]
        changed = len(new_data) != len(data)
        if changed:
            self._write_raw(new_data)
        return changed

    # ---------------- Recherches ---------------- #

    def find(self, predicate: Callable[[Row], bool]) -> List[Row]:
        return [r for r in self._read_raw() if predicate(r)]
