from __future__ import annotations
import logging
import re
from datetime import date
from typing import Callable, Dict, Iterable, Optional, Sequence

from devisfacture.models.company import CompanyProfile, DocNumberFormat
from devisfacture.models.document import DocumentData

logger = logging.getLogger(__name__)

DEFAULT_FORMAT: DocNumberFormat = "seq-mmyy"

# (documents existants, format, préfixe, date) -> prochain numéro de séquence
SequenceStrategy = Callable[[Sequence[DocumentData], str, str, date], int]


def format_document_number(seq: int, scheme: str, prefix: str, now: date) -> str:
    """
    seq-mmyy -> {prefix}{seq}-{MM}{YY}
    seq/yyyy -> {prefix}{seq}/{YYYY}
    yyyy-seq -> {prefix}{YYYY}-{seq}
    seq      -> {prefix}{seq}  (aussi pour un format inconnu)
    """
    prefix = prefix or ""
    if scheme == "seq-mmyy":
        body = f"{seq}-{now.month:02d}{now.year % 100:02d}"
    elif scheme == "seq/yyyy":
        body = f"{seq}/{now.year:04d}"
    elif scheme == "yyyy-seq":
        body = f"{now.year:04d}-{seq}"
    else:
        body = f"{seq}"
    return f"{prefix}{body}"


def _number_pattern(scheme: str, prefix: str, now: date) -> re.Pattern[str]:
    p = re.escape(prefix or "")
    if scheme == "seq-mmyy":
        return re.compile(rf"^{p}(\d+)-{now.month:02d}{now.year % 100:02d}$")
    if scheme == "seq/yyyy":
        return re.compile(rf"^{p}(\d+)/{now.year:04d}$")
    if scheme == "yyyy-seq":
        return re.compile(rf"^{p}{now.year:04d}-(\d+)$")
    return re.compile(rf"^{p}(\d+)$")


# ---------- Stratégies de séquence ---------- #

def count_sequence(docs: Sequence[DocumentData], scheme: str, prefix: str, now: date) -> int:
    """Nombre total de documents + 1."""
    return len(docs) + 1


def period_max_sequence(docs: Sequence[DocumentData], scheme: str, prefix: str, now: date) -> int:
    """Plus grande séquence de la période courante (même format et préfixe) + 1."""
    pattern = _number_pattern(scheme, prefix, now)
    max_seq = 0
    for d in docs:
        m = pattern.match(d.number or "")
        if m:
            max_seq = max(max_seq, int(m.group(1)))
    return max_seq + 1


STRATEGIES: Dict[str, SequenceStrategy] = {
    "count": count_sequence,
    "period-max": period_max_sequence,
}
DEFAULT_STRATEGY = "period-max"


def get_strategy(name: Optional[str]) -> SequenceStrategy:
    strategy = STRATEGIES.get(name or DEFAULT_STRATEGY)
    if strategy is None:
        logger.warning("Stratégie de numérotation inconnue %r, utilisation de %s", name, DEFAULT_STRATEGY)
        strategy = STRATEGIES[DEFAULT_STRATEGY]
    return strategy


def next_document_number(
    docs: Iterable[DocumentData],
    profile: CompanyProfile,
    now: date,
    strategy: SequenceStrategy = period_max_sequence,
) -> str:
    scheme = profile.doc_number_format or DEFAULT_FORMAT
    prefix = profile.doc_number_prefix or ""
    seq = strategy(list(docs), scheme, prefix, now)
    return format_document_number(seq, scheme, prefix, now)
