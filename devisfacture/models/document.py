from __future__ import annotations
from typing import List, Literal, Optional

from pydantic import Field, model_validator

from .common import Number, Record, gen_id, today_iso

DocType = Literal["DEVIS", "FACTURE"]
DocStatus = Literal["BROUILLON", "ENVOYÉ", "PAYÉ", "ACCEPTÉ"]
TemplateType = Literal["classic", "minimal", "modern"]


class DocItem(Record):
    id: str = Field(default_factory=gen_id)
    designation: str = ""
    quantity: Number = 0.0
    unit_price: Number = 0.0
    total: Number = 0.0
    is_total_overridden: bool = False  # total saisi à la main
    is_section_header: bool = False    # ligne de titre, hors calculs


class DocumentData(Record):
    id: str = Field(default_factory=gen_id)
    client_id: Optional[str] = None
    type: DocType = "DEVIS"
    number: str = ""
    date: str = Field(default_factory=today_iso)  # YYYY-MM-DD
    status: DocStatus = "BROUILLON"
    template: TemplateType = "classic"

    # Copie du client à la création (jamais une jointure)
    client_name: str = ""
    client_address: str = ""
    client_ice: str = ""
    client_email: str = ""
    client_phone: str = ""

    object: str = ""
    items: List[DocItem] = Field(default_factory=list)

    # Totaux
    sub_total: Number = 0.0  # HT
    has_vat: bool = False
    vat_rate: Number = 20.0
    vat_amount: Number = 0.0
    total_ttc: Number = Field(default=0.0, alias="totalTTC")

    has_deposit: Optional[bool] = None
    deposit_percentage: Number = 50.0
    deposit_amount: Number = 0.0

    notes: Optional[str] = None
    currency: str = "DH"

    @model_validator(mode="after")
    def _default_deposit(self) -> "DocumentData":
        # acompte activé par défaut pour les devis
        if self.has_deposit is None:
            self.has_deposit = self.type == "DEVIS"
        return self

    @property
    def is_invoice(self) -> bool:
        return self.type == "FACTURE"
