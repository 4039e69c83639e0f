from __future__ import annotations
from typing import List, Optional

from pydantic import Field

from .common import Number, Record, gen_id, now_iso, today_iso


class Payment(Record):
    id: str = Field(default_factory=gen_id)
    date: str = Field(default_factory=today_iso)
    amount: Number = 0.0
    method: str = "Espèces"  # Espèces, Chèque, Virement…
    note: Optional[str] = None


class ProjectImage(Record):
    id: str = Field(default_factory=gen_id)
    url: str = ""  # base64
    caption: Optional[str] = None


class Project(Record):
    id: str = Field(default_factory=gen_id)
    title: str = ""
    description: str = ""
    date: str = Field(default_factory=today_iso)
    before_images: List[ProjectImage] = Field(default_factory=list)
    after_images: List[ProjectImage] = Field(default_factory=list)


class Client(Record):
    id: str = Field(default_factory=gen_id)
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    ice: str = ""
    payments: List[Payment] = Field(default_factory=list)  # plus récent en tête
    projects: List[Project] = Field(default_factory=list)
    notes: Optional[str] = None
    created_at: str = Field(default_factory=now_iso)

    # Ajustement manuel du budget
    custom_total: Optional[Number] = None
    custom_total_note: Optional[str] = None


class ClientFinancialSummary(Record):
    """Vue dérivée, jamais persistée."""

    invoice_total: float = 0.0
    quote_total: float = 0.0
    is_custom: bool = False
    final_total: float = 0.0
    total_paid: float = 0.0
    balance: float = 0.0
