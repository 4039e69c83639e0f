from __future__ import annotations
from typing import Optional

from pydantic import Field

from .common import Record, gen_id


class Supplier(Record):
    id: str = Field(default_factory=gen_id)
    name: str = ""
    category: str = ""  # Matériaux, Transport, Service…
    phone: str = ""
    email: str = ""
    address: str = ""
    ice: Optional[str] = None
    notes: Optional[str] = None
