from __future__ import annotations
import logging
from typing import Any, Dict, List, Literal, Optional

from devisfacture.models.common import to_number
from devisfacture.models.document import DocItem, DocumentData

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]

# champs modifiables depuis l'éditeur (noms Python)
EDITABLE_FIELDS = ("designation", "quantity", "unit_price", "total", "is_total_overridden")


def _field_name(field: str) -> Optional[str]:
    """Accepte le nom Python ou la clé JSON (unitPrice, isTotalOverridden…)."""
    if field in DocItem.model_fields:
        return field
    for name, info in DocItem.model_fields.items():
        if info.alias == field:
            return name
    return None


# ---------- Recalcul ---------- #

def recompute(doc: DocumentData) -> DocumentData:
    """
    Recalcule lignes et totaux du document.

    - ligne de titre : inchangée, hors calculs
    - total forcé : la valeur saisie compte telle quelle
    - sinon total = quantité x prix unitaire (réécrit si différent)

    Renvoie `doc` lui-même si rien n'a changé, sinon une copie où seules les
    valeurs modifiées sont remplacées.
    """
    sub_total = 0.0
    new_items: List[DocItem] = []
    items_changed = False

    for item in doc.items:
        if item.is_section_header:
            new_items.append(item)
            continue

        if item.is_total_overridden:
            sub_total += to_number(item.total)
            new_items.append(item)
            continue

        # produit hors plage (inf) -> 0, comme une saisie invalide
        auto_total = to_number(to_number(item.quantity) * to_number(item.unit_price))
        sub_total += auto_total
        if item.total != auto_total:
            new_items.append(item.model_copy(update={"total": auto_total}))
            items_changed = True
        else:
            new_items.append(item)

    sub_total = to_number(sub_total)
    vat_amount = to_number(sub_total * to_number(doc.vat_rate) / 100) if doc.has_vat else 0.0
    total_ttc = to_number(sub_total + vat_amount)

    deposit_pct = to_number(doc.deposit_percentage)
    deposit_amount = to_number(total_ttc * deposit_pct / 100) if doc.has_deposit and deposit_pct > 0 else 0.0

    totals = {
        "sub_total": sub_total,
        "vat_amount": vat_amount,
        "total_ttc": total_ttc,
        "deposit_amount": deposit_amount,
    }
    update: Dict[str, Any] = {k: v for k, v in totals.items() if getattr(doc, k) != v}
    if items_changed:
        update["items"] = new_items

    if not update:
        logger.debug("Document %s déjà à jour", doc.id)
        return doc
    return doc.model_copy(update=update)


# ---------- Edition d'une ligne ---------- #

def edit_item(doc: DocumentData, item_id: str, field: str, value: Any) -> DocumentData:
    """
    Modifie un champ d'une ligne puis recalcule.
    Quantité / prix -> retour au calcul auto ; total -> total forcé.
    """
    name = _field_name(field)
    if name not in EDITABLE_FIELDS:
        logger.debug("Champ non modifiable ignoré: %s", field)
        return recompute(doc)

    items: List[DocItem] = []
    for item in doc.items:
        if item.id != item_id:
            items.append(item)
            continue
        updates: Dict[str, Any] = {}
        if name == "designation":
            updates["designation"] = "" if value is None else str(value)
        elif name in ("quantity", "unit_price"):
            updates[name] = to_number(value)
            if not item.is_section_header:
                updates["is_total_overridden"] = False
        elif name == "total":
            updates["total"] = to_number(value)
            updates["is_total_overridden"] = True
        else:
            updates["is_total_overridden"] = bool(value)
        items.append(item.model_copy(update=updates))

    return recompute(doc.model_copy(update={"items": items}))


def reset_total(doc: DocumentData, item_id: str) -> DocumentData:
    """Repasse la ligne en calcul automatique."""
    return edit_item(doc, item_id, "is_total_overridden", False)


# ---------- Ajout / suppression / ordre ---------- #

def add_item(doc: DocumentData, designation: str = "") -> DocumentData:
    item = DocItem(designation=designation, quantity=1, unit_price=0, total=0)
    return recompute(doc.model_copy(update={"items": [*doc.items, item]}))


def add_section(doc: DocumentData, designation: str = "Nouvelle section") -> DocumentData:
    item = DocItem(
        designation=designation,
        quantity=0,
        unit_price=0,
        total=0,
        is_total_overridden=True,
        is_section_header=True,
    )
    return recompute(doc.model_copy(update={"items": [*doc.items, item]}))


def delete_item(doc: DocumentData, item_id: str) -> DocumentData:
    items = [i for i in doc.items if i.id != item_id]
    if len(items) == len(doc.items):
        return recompute(doc)
    return recompute(doc.model_copy(update={"items": items}))


def move_item(doc: DocumentData, index: int, direction: Direction) -> DocumentData:
    """Echange la ligne avec sa voisine ; sans effet aux extrémités."""
    n = len(doc.items)
    if not 0 <= index < n:
        return doc
    if direction == "up":
        other = index - 1
    elif direction == "down":
        other = index + 1
    else:
        return doc
    if not 0 <= other < n:
        return doc

    items = list(doc.items)
    items[index], items[other] = items[other], items[index]
    return doc.model_copy(update={"items": items})


# ---------- TVA / acompte ---------- #

def set_tax(doc: DocumentData, has_vat: bool, vat_rate: Any = None) -> DocumentData:
    update: Dict[str, Any] = {"has_vat": bool(has_vat)}
    if vat_rate is not None:
        update["vat_rate"] = to_number(vat_rate)
    return recompute(doc.model_copy(update=update))


def set_deposit(doc: DocumentData, has_deposit: bool, percentage: Any = None) -> DocumentData:
    update: Dict[str, Any] = {"has_deposit": bool(has_deposit)}
    if percentage is not None:
        update["deposit_percentage"] = to_number(percentage)
    return recompute(doc.model_copy(update=update))
