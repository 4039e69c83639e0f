from __future__ import annotations
import logging
import os
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Set, Type, get_args

from pydantic import ValidationError

from devisfacture.config import DOCUMENTS_JSON, data_path
from devisfacture.models.client import Client
from devisfacture.models.common import Record, gen_id
from devisfacture.models.document import DocItem, DocStatus, DocType, DocumentData, TemplateType
from devisfacture.services.line_items import recompute
from devisfacture.services.numbering import next_document_number
from devisfacture.services.settings_service import SettingsService
from devisfacture.storage.json_repo import JsonRepository

logger = logging.getLogger(__name__)

SAMPLE_ITEM: Dict[str, Any] = {
    "id": "1",
    "designation": "Service ou produit exemple",
    "quantity": 1,
    "unitPrice": 100,
    "total": 100,
    "isTotalOverridden": False,
    "isSectionHeader": False,
}

_CHOICES = {
    "type": get_args(DocType),
    "status": get_args(DocStatus),
    "template": get_args(TemplateType),
}


# ---------- Helpers ---------- #

def _text_keys(model: Type[Record]) -> Set[str]:
    keys: Set[str] = set()
    for name, info in model.model_fields.items():
        if info.annotation in (str, Optional[str]):
            keys.update({name, info.alias or name})
    return keys


_DOC_TEXT = _text_keys(DocumentData)
_ITEM_TEXT = _text_keys(DocItem)


def _stringify(data: Dict[str, Any], keys: Set[str]) -> Dict[str, Any]:
    # OCR : numéro ou téléphone lus comme nombres
    return {
        k: str(v) if k in keys and isinstance(v, (int, float)) and not isinstance(v, bool) else v
        for k, v in data.items()
    }


def apply_defaults(partial: Optional[Mapping[str, Any]] = None) -> DocumentData:
    """
    Document complet à partir d'un document partiel (import OCR…).
    Champs absents ou null -> valeurs par défaut ; sans lignes -> ligne exemple.
    """
    data = _stringify({k: v for k, v in dict(partial or {}).items() if v is not None}, _DOC_TEXT)
    for key, allowed in _CHOICES.items():
        # valeur hors liste (ex. "Facture") : on tente la casse, sinon défaut
        if key in data and data[key] not in allowed:
            upper = str(data[key]).upper()
            if upper in allowed:
                data[key] = upper
            else:
                data.pop(key)
    if "items" not in data:
        data["items"] = [dict(SAMPLE_ITEM)]
    elif isinstance(data["items"], list):
        data["items"] = [_stringify(i, _ITEM_TEXT) if isinstance(i, dict) else i for i in data["items"]]
    return recompute(DocumentData.model_validate(data))


def snapshot_client(doc: DocumentData, client: Client) -> DocumentData:
    """Copie les coordonnées du client dans le document (instantané, pas de lien vivant)."""
    return doc.model_copy(update={
        "client_id": client.id,
        "client_name": client.name,
        "client_address": client.address,
        "client_ice": client.ice,
        "client_email": client.email,
        "client_phone": client.phone,
    })


def _as_date(now: Optional[date]) -> date:
    if now is None:
        return datetime.now()
    return now


# ---------- Service ---------- #

class DocumentService:
    def __init__(
        self,
        data_dir: Optional[os.PathLike | str] = None,
        settings: Optional[SettingsService] = None,
    ) -> None:
        self.repo = JsonRepository(data_path(DOCUMENTS_JSON, data_dir), entity_name="document", key="id")
        self.settings = settings or SettingsService(data_dir)

    def _hydrate(self, d: Dict[str, Any]) -> Optional[DocumentData]:
        try:
            return DocumentData.model_validate(d)
        except ValidationError as e:
            logger.warning("Document %s ignoré (invalide): %s", d.get("id"), e)
            return None

    # ----- Lecture ----- #

    def list_documents(self) -> List[DocumentData]:
        out: List[DocumentData] = []
        for d in self.repo.list_all():
            doc = self._hydrate(d)
            if doc is not None:
                out.append(doc)
        return out

    def get_by_id(self, doc_id: str) -> Optional[DocumentData]:
        d = self.repo.get_by_id(doc_id)
        return self._hydrate(d) if d else None

    def list_by_client(self, client_id: str) -> List[DocumentData]:
        rows = self.repo.find(lambda d: d.get("clientId", d.get("client_id")) == client_id)
        return [doc for doc in map(self._hydrate, rows) if doc is not None]

    # ----- Ecriture ----- #

    def save_document(self, doc: DocumentData) -> DocumentData:
        doc = recompute(doc)
        self.repo.upsert(doc)
        logger.info("Document %s (%s) enregistré", doc.number or doc.id, doc.type)
        return doc

    def delete_document(self, doc_id: str) -> bool:
        deleted = self.repo.delete(doc_id)
        if deleted:
            logger.info("Document %s supprimé", doc_id)
        return deleted

    # ----- Création ----- #

    def next_number(self, now: Optional[date] = None) -> str:
        return next_document_number(
            self.list_documents(),
            self.settings.get_profile(),
            _as_date(now),
            strategy=self.settings.sequence_strategy(),
        )

    def create_document(self, doc_type: str = "DEVIS", now: Optional[date] = None) -> DocumentData:
        now = _as_date(now)
        doc = apply_defaults({
            "id": gen_id(),
            "type": doc_type,
            "number": self.next_number(now),
            "date": now.strftime("%Y-%m-%d"),
        })
        return self.save_document(doc)

    def import_partial(self, partial: Mapping[str, Any], now: Optional[date] = None) -> DocumentData:
        """Document importé (OCR) : fusion sur les défauts, numéro importé prioritaire."""
        now = _as_date(now)
        data = dict(partial)
        data["id"] = gen_id()
        if not data.get("number"):
            data["number"] = self.next_number(now)
        if not data.get("date"):
            data["date"] = now.strftime("%Y-%m-%d")
        return self.save_document(apply_defaults(data))

    def attach_client(self, doc: DocumentData, client: Client) -> DocumentData:
        return snapshot_client(doc, client)
