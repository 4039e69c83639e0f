from __future__ import annotations

import json
from datetime import datetime

from devisfacture.models.client import Client
from devisfacture.models.company import CompanyProfile
from devisfacture.models.document import DocItem, DocumentData
from devisfacture.services.document_service import DocumentService, apply_defaults, snapshot_client
from devisfacture.services.settings_service import SettingsService

NOW = datetime(2025, 12, 15, 9, 0)


def test_apply_defaults_on_empty_partial() -> None:
    doc = apply_defaults({})

    assert doc.type == "DEVIS"
    assert doc.status == "BROUILLON"
    assert doc.template == "classic"
    assert doc.currency == "DH"
    assert doc.has_vat is False
    assert doc.vat_rate == 20
    assert doc.has_deposit is True
    assert doc.deposit_percentage == 50
    assert [i.designation for i in doc.items] == ["Service ou produit exemple"]
    assert doc.sub_total == 100
    assert doc.total_ttc == 100
    assert doc.deposit_amount == 50


def test_apply_defaults_on_imported_invoice() -> None:
    doc = apply_defaults({
        "type": "facture",
        "status": "inconnu",
        "clientName": "Hôtel Atlas",
        "hasVat": True,
        "depositPercentage": None,
        "items": [
            {"designation": "Lot 1", "isSectionHeader": True},
            {"designation": "Enduit", "quantity": 2, "unitPrice": 50},
        ],
    })

    assert doc.type == "FACTURE"
    assert doc.status == "BROUILLON"
    assert doc.client_name == "Hôtel Atlas"
    assert doc.has_deposit is False
    assert doc.deposit_percentage == 50
    assert doc.items[1].total == 100
    assert doc.sub_total == 100
    assert doc.vat_amount == 20
    assert doc.total_ttc == 120
    assert doc.deposit_amount == 0
    assert doc.items[0].id != doc.items[1].id


def test_apply_defaults_stringifies_numeric_text() -> None:
    doc = apply_defaults({
        "number": 42,
        "clientPhone": 600123456,
        "client_ice": 1234,
        "items": [{"designation": 7, "quantity": 2, "unitPrice": 5}],
    })

    assert doc.number == "42"
    assert doc.client_phone == "600123456"
    assert doc.client_ice == "1234"
    assert doc.items[0].designation == "7"
    assert doc.items[0].total == 10
    assert doc.has_vat is False


def test_explicit_empty_items_are_kept() -> None:
    doc = apply_defaults({"items": []})

    assert doc.items == []
    assert doc.sub_total == 0


def test_snapshot_is_a_copy_not_a_join() -> None:
    client = Client(id="c1", name="Atlas", address="Rabat", ice="0011", email="a@b.ma", phone="0600")
    doc = snapshot_client(DocumentData(), client)

    client.name = "Atlas Renamed"

    assert doc.client_id == "c1"
    assert doc.client_name == "Atlas"
    assert doc.client_address == "Rabat"
    assert doc.client_ice == "0011"
    assert doc.client_email == "a@b.ma"
    assert doc.client_phone == "0600"


def test_create_document_numbers_sequentially(tmp_path) -> None:
    service = DocumentService(tmp_path)

    first = service.create_document(now=NOW)
    second = service.create_document("FACTURE", now=NOW)

    assert first.number == "1-1225"
    assert second.number == "2-1225"
    assert first.date == "2025-12-15"
    assert second.type == "FACTURE"
    assert second.has_deposit is False
    assert {d.id for d in service.list_documents()} == {first.id, second.id}


def test_numbering_follows_settings(tmp_path) -> None:
    settings = SettingsService(tmp_path)
    settings.save_profile(CompanyProfile(doc_number_format="yyyy-seq", doc_number_prefix="FAC-"))
    service = DocumentService(tmp_path, settings=settings)

    service.save_document(DocumentData(number="FAC-2025-8"))
    service.save_document(DocumentData(number="FAC-2024-30"))
    assert service.next_number(NOW) == "FAC-2025-9"

    settings.set_sequence_strategy("count")
    assert service.next_number(NOW) == "FAC-2025-3"


def test_import_partial_keeps_imported_number(tmp_path) -> None:
    service = DocumentService(tmp_path)

    imported = service.import_partial({"id": "ocr", "number": "F-77", "type": "FACTURE"}, now=NOW)
    fresh = service.import_partial({"clientName": "X"}, now=NOW)

    assert imported.number == "F-77"
    assert imported.id != "ocr"
    assert fresh.number == "1-1225"
    assert fresh.date == "2025-12-15"
    assert service.get_by_id(imported.id) == imported


def test_save_recomputes_before_persisting(tmp_path) -> None:
    service = DocumentService(tmp_path)
    doc = DocumentData(id="d1", items=[DocItem(quantity=3, unit_price=10, total=999)], sub_total=1)

    saved = service.save_document(doc)

    assert saved.sub_total == 30
    stored = json.loads((tmp_path / "documents.json").read_text(encoding="utf-8"))
    assert stored[0]["subTotal"] == 30
    assert stored[0]["items"][0]["total"] == 30
    assert stored[0]["totalTTC"] == 30


def test_list_by_client_and_delete(tmp_path) -> None:
    service = DocumentService(tmp_path)
    a = service.save_document(DocumentData(client_id="c1"))
    service.save_document(DocumentData(client_id="c2"))

    assert [d.id for d in service.list_by_client("c1")] == [a.id]
    assert service.delete_document(a.id) is True
    assert service.list_by_client("c1") == []
    assert service.get_by_id(a.id) is None


def test_invalid_stored_document_is_skipped(tmp_path) -> None:
    service = DocumentService(tmp_path)
    (tmp_path / "documents.json").write_text(
        json.dumps([{"id": "bad", "type": "BON"}, {"id": "ok", "type": "DEVIS"}]),
        encoding="utf-8",
    )

    assert [d.id for d in service.list_documents()] == ["ok"]
    assert service.get_by_id("bad") is None


def test_list_by_client_reads_stored_rows(tmp_path) -> None:
    service = DocumentService(tmp_path)
    (tmp_path / "documents.json").write_text(
        json.dumps([
            {"id": "a", "clientId": "c1"},
            {"id": "b", "client_id": "c1"},
            {"id": "bad", "clientId": "c1", "type": "BON"},
            {"id": "other", "clientId": "c2"},
            {"id": "none"},
        ]),
        encoding="utf-8",
    )

    assert [d.id for d in service.list_by_client("c1")] == ["a", "b"]
    assert [d.id for d in service.list_by_client("c2")] == ["other"]
    assert service.list_by_client("c3") == []
