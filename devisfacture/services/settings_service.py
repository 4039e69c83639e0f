from __future__ import annotations
import logging
import os
from typing import Any, Dict, Optional

from pydantic import ValidationError

from devisfacture.config import SETTINGS_JSON, data_path
from devisfacture.models.company import INITIAL_PROFILE, CompanyProfile
from devisfacture.services.numbering import DEFAULT_STRATEGY, STRATEGIES, SequenceStrategy, get_strategy
from devisfacture.storage.json_repo import dump_json, load_json

logger = logging.getLogger(__name__)


class SettingsService:
    """settings.json : {"company": {...}, "numbering": {"strategy": ...}}"""

    def __init__(self, data_dir: Optional[os.PathLike | str] = None) -> None:
        self.path = data_path(SETTINGS_JSON, data_dir)

    def _load(self) -> Dict[str, Any]:
        s = load_json(self.path)
        return s if isinstance(s, dict) else {}

    # ----- Société ----- #

    def get_profile(self) -> CompanyProfile:
        data = self._load().get("company")
        if not isinstance(data, dict):
            return INITIAL_PROFILE.model_copy()
        try:
            return CompanyProfile.model_validate(data)
        except ValidationError as e:
            logger.warning("Profil société invalide dans %s, valeurs par défaut (%s)", self.path, e)
            return INITIAL_PROFILE.model_copy()

    def save_profile(self, profile: CompanyProfile) -> CompanyProfile:
        s = self._load()
        s["company"] = profile.to_json_dict()
        dump_json(self.path, s)
        logger.info("Profil société enregistré")
        return profile

    # ----- Numérotation ----- #

    def sequence_strategy_name(self) -> str:
        numbering = self._load().get("numbering")
        if isinstance(numbering, dict) and numbering.get("strategy"):
            return str(numbering["strategy"])
        return DEFAULT_STRATEGY

    def sequence_strategy(self) -> SequenceStrategy:
        return get_strategy(self.sequence_strategy_name())

    def set_sequence_strategy(self, name: str) -> None:
        if name not in STRATEGIES:
            raise ValueError(f"Unknown numbering strategy: {name}")
        s = self._load()
        numbering = s.get("numbering") if isinstance(s.get("numbering"), dict) else {}
        numbering["strategy"] = name
        s["numbering"] = numbering
        dump_json(self.path, s)
