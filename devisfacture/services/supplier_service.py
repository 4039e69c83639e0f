from __future__ import annotations
import logging
import os
from typing import List, Optional

from pydantic import ValidationError

from devisfacture.config import SUPPLIERS_JSON, data_path
from devisfacture.models.supplier import Supplier
from devisfacture.storage.json_repo import JsonRepository

logger = logging.getLogger(__name__)


class SupplierService:
    def __init__(self, data_dir: Optional[os.PathLike | str] = None) -> None:
        self.repo = JsonRepository(data_path(SUPPLIERS_JSON, data_dir), entity_name="supplier", key="id")

    def list_suppliers(self) -> List[Supplier]:
        out: List[Supplier] = []
        for d in self.repo.list_all():
            try:
                out.append(Supplier.model_validate(d))
            except ValidationError as e:
                logger.warning("Fournisseur %s ignoré (invalide): %s", d.get("id"), e)
        return out

    def get_by_id(self, supplier_id: str) -> Optional[Supplier]:
        d = self.repo.get_by_id(supplier_id)
        if not d:
            return None
        try:
            return Supplier.model_validate(d)
        except ValidationError as e:
            logger.warning("Fournisseur %s invalide: %s", supplier_id, e)
            return None

    def save_supplier(self, supplier: Supplier) -> Supplier:
        self.repo.upsert(supplier)
        logger.info("Fournisseur %s enregistré", supplier.id)
        return supplier

    def delete_supplier(self, supplier_id: str) -> bool:
        return self.repo.delete(supplier_id)
