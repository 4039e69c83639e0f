from __future__ import annotations
import math
import re
import uuid
from datetime import date, datetime
from typing import Annotated, Any, Dict

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


def gen_id() -> str:
    return str(uuid.uuid4())


def today_iso() -> str:
    return date.today().isoformat()


def now_iso() -> str:
    return datetime.now().isoformat()


def to_number(value: Any) -> float:
    """
    Conversion "souple" -> float.
    Vide, None, non numérique, NaN ou infini -> 0. Accepte la virgule décimale.
    """
    if value is None or value == "":
        return 0.0
    try:
        if isinstance(value, (int, float)):
            f = float(value)
        else:
            s = re.sub(r"[^0-9,.\-eE]", "", str(value)).replace(",", ".")
            f = float(s)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return f if math.isfinite(f) else 0.0


Number = Annotated[float, BeforeValidator(to_number)]


class Record(BaseModel):
    """
    Base des enregistrements persistés.
    - clés camelCase en JSON (isTotalOverridden, totalTTC...), snake_case en Python
    - null et absent sont équivalents en lecture ; absent en écriture
    - les clés inconnues sont conservées (aller-retour sans perte)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
