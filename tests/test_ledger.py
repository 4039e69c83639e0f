from __future__ import annotations

from devisfacture.models.client import Client, Payment
from devisfacture.models.document import DocumentData
from devisfacture.services.ledger import (
    clear_budget_override,
    record_payment,
    set_budget_override,
    summarize,
)


def _invoice(client_id: str, total: float, doc_type: str = "FACTURE") -> DocumentData:
    return DocumentData(type=doc_type, client_id=client_id, total_ttc=total)


def _client(**kw) -> Client:
    payments = [Payment(id="p2", amount=1000), Payment(id="p1", amount=2000)]
    return Client(id="c1", name="Atlas", payments=payments, **kw)


def _docs() -> list[DocumentData]:
    return [
        _invoice("c1", 3000),
        _invoice("c1", 2000),
        _invoice("c1", 900, doc_type="DEVIS"),
        _invoice("c2", 7000),
    ]


def test_summary_auto_mode() -> None:
    s = summarize(_client(), _docs())

    assert s.invoice_total == 5000
    assert s.final_total == 5000
    assert s.total_paid == 3000
    assert s.balance == 2000
    assert s.is_custom is False
    assert s.quote_total == 900


def test_summary_override_mode_keeps_raw_invoice_total() -> None:
    s = summarize(_client(custom_total=4000), _docs())

    assert s.final_total == 4000
    assert s.balance == 1000
    assert s.is_custom is True
    assert s.invoice_total == 5000


def test_overpayment_gives_negative_balance() -> None:
    client = _client()
    client = record_payment(client, Payment(amount=2500))

    assert summarize(client, _docs()).balance == -500


def test_summary_without_documents_or_payments() -> None:
    s = summarize(Client(id="c9"), [])

    assert s.invoice_total == 0
    assert s.total_paid == 0
    assert s.balance == 0


def test_record_payment_prepends() -> None:
    client = _client()
    payment = Payment(id="p3", amount=150, method="Chèque", note="Solde cuisine")

    out = record_payment(client, payment)

    assert [p.id for p in out.payments] == ["p3", "p2", "p1"]
    assert [p.id for p in client.payments] == ["p2", "p1"]


def test_non_positive_payment_is_ignored() -> None:
    client = _client()

    assert record_payment(client, Payment(amount=0)) is client
    assert record_payment(client, Payment(amount=-10)) is client
    assert record_payment(client, Payment(amount="abc")) is client


def test_budget_override_set_and_cleared() -> None:
    client = _client()

    custom = set_budget_override(client, 4000, "")
    assert custom.custom_total == 4000
    assert custom.custom_total_note == ""
    assert client.custom_total is None

    assert set_budget_override(custom, 0, "ignored").custom_total is None
    assert set_budget_override(custom, None).custom_total_note is None
    assert set_budget_override(custom, -5).custom_total is None

    cleared = clear_budget_override(custom)
    assert cleared.custom_total is None
    assert cleared.custom_total_note is None
    assert clear_budget_override(cleared) is cleared
