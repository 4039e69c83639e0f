from __future__ import annotations
import logging
from typing import Iterable, Optional

from devisfacture.models.client import Client, ClientFinancialSummary, Payment
from devisfacture.models.common import to_number
from devisfacture.models.document import DocumentData

logger = logging.getLogger(__name__)


def summarize(client: Client, documents: Iterable[DocumentData]) -> ClientFinancialSummary:
    """
    Situation financière du client.
    Seules les factures rattachées au client (clientId) entrent dans le total ;
    un budget manuel (customTotal) remplace ce total pour le solde.
    """
    invoice_total = 0.0
    quote_total = 0.0
    for d in documents:
        if d.client_id != client.id:
            continue
        if d.is_invoice:
            invoice_total += to_number(d.total_ttc)
        elif d.type == "DEVIS":
            quote_total += to_number(d.total_ttc)

    total_paid = sum((to_number(p.amount) for p in client.payments), 0.0)

    is_custom = client.custom_total is not None
    final_total = to_number(client.custom_total) if is_custom else invoice_total

    return ClientFinancialSummary(
        invoice_total=invoice_total,
        quote_total=quote_total,
        is_custom=is_custom,
        final_total=final_total,
        total_paid=total_paid,
        balance=final_total - total_paid,
    )


def record_payment(client: Client, payment: Payment) -> Client:
    """Ajoute le paiement en tête de liste. Montant <= 0 : client inchangé."""
    if to_number(payment.amount) <= 0:
        logger.debug("Paiement ignoré (montant %r) pour le client %s", payment.amount, client.id)
        return client
    return client.model_copy(update={"payments": [payment, *client.payments]})


def set_budget_override(client: Client, amount: Optional[float] = None, note: Optional[str] = None) -> Client:
    """
    Budget manuel : montant > 0 -> remplace le total des factures ;
    absent ou <= 0 -> retour au mode auto.
    """
    value = to_number(amount) if amount is not None else 0.0
    if value <= 0:
        return clear_budget_override(client)
    return client.model_copy(update={"custom_total": value, "custom_total_note": note})


def clear_budget_override(client: Client) -> Client:
    if client.custom_total is None and client.custom_total_note is None:
        return client
    return client.model_copy(update={"custom_total": None, "custom_total_note": None})
