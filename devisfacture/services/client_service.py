from __future__ import annotations
import logging
import os
from typing import Any, List, Optional

from pydantic import ValidationError

from devisfacture.config import CLIENTS_JSON, data_path
from devisfacture.models.client import Client, ClientFinancialSummary, Payment, Project
from devisfacture.services import ledger
from devisfacture.services.document_service import DocumentService
from devisfacture.storage.json_repo import JsonRepository

logger = logging.getLogger(__name__)


class ClientService:
    def __init__(
        self,
        data_dir: Optional[os.PathLike | str] = None,
        documents: Optional[DocumentService] = None,
    ) -> None:
        self.repo = JsonRepository(data_path(CLIENTS_JSON, data_dir), entity_name="client", key="id")
        self.documents = documents or DocumentService(data_dir)

    # ----- CRUD ----- #

    def list_clients(self) -> List[Client]:
        out: List[Client] = []
        for d in self.repo.list_all():
            try:
                out.append(Client.model_validate(d))
            except ValidationError as e:
                # une entrée invalide ne doit pas casser la liste
                logger.warning("Client %s ignoré (invalide): %s", d.get("id"), e)
        return out

    def get_by_id(self, client_id: str) -> Optional[Client]:
        d = self.repo.get_by_id(client_id)
        if not d:
            return None
        try:
            return Client.model_validate(d)
        except ValidationError as e:
            logger.warning("Client %s invalide: %s", client_id, e)
            return None

    def _require(self, client_id: str) -> Client:
        client = self.get_by_id(client_id)
        if client is None:
            raise ValueError(f"client with id={client_id} not found")
        return client

    def add_client(self, client: Client) -> Client:
        self.repo.add(client)
        logger.info("Client %s ajouté", client.id)
        return client

    def save_client(self, client: Client) -> Client:
        self.repo.upsert(client)
        return client

    def delete_client(self, client_id: str) -> bool:
        # les documents gardent leur copie du client
        return self.repo.delete(client_id)

    # ----- Finances ----- #

    def financials(self, client_id: str) -> ClientFinancialSummary:
        client = self._require(client_id)
        return ledger.summarize(client, self.documents.list_by_client(client_id))

    def add_payment(
        self,
        client_id: str,
        amount: Any,
        method: str = "Espèces",
        date: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Client:
        client = self._require(client_id)
        payment = Payment(amount=amount, method=method or "Espèces", note=note)
        if date:
            payment.date = date
        updated = ledger.record_payment(client, payment)
        if updated is client:
            return client
        self.save_client(updated)
        logger.info("Paiement de %.2f (%s) enregistré pour le client %s", payment.amount, payment.method, client_id)
        return updated

    def set_budget_override(self, client_id: str, amount: Any = None, note: Optional[str] = None) -> Client:
        client = self._require(client_id)
        updated = ledger.set_budget_override(client, amount, note)
        if updated is not client:
            self.save_client(updated)
        return updated

    # ----- Chantiers ----- #

    def add_project(self, client_id: str, project: Project) -> Client:
        client = self._require(client_id)
        if not project.title:
            return client
        updated = client.model_copy(update={"projects": [project, *client.projects]})
        return self.save_client(updated)

    def delete_project(self, client_id: str, project_id: str) -> Client:
        client = self._require(client_id)
        projects = [p for p in client.projects if p.id != project_id]
        if len(projects) == len(client.projects):
            return client
        return self.save_client(client.model_copy(update={"projects": projects}))
