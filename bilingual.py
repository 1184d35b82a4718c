"""
Bilingual content writer.

Turns the English text an admin typed into the `{en, ar}` pairs stored for
every public-facing text field.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from fastapi import Depends

from schemas import BilingualText
from translator import Translator, get_translator

logger = logging.getLogger(__name__)


class BilingualWriter:
    def __init__(self, translator: Translator):
        self.translator = translator

    def pair(self, value: Any) -> Optional[Dict[str, str]]:
        """
        Build `{en, ar}` for one value.

        Accepts plain English text or `{en, ar?}`; a non-empty `ar` is kept as
        entered. Returns None for empty input.
        """
        if value is None:
            return None
        if isinstance(value, BilingualText):
            en, ar = value.en, value.ar
        elif isinstance(value, dict):
            en, ar = value.get("en") or "", value.get("ar")
        else:
            en, ar = str(value), None
        if not en.strip():
            return None
        if ar and ar.strip():
            return {"en": en, "ar": ar}
        return {"en": en, "ar": self.translator.translate(en)}

    def compose(
        self,
        payload: Dict[str, Any],
        translatable: Iterable[str],
        clear_empty: bool = False,
    ) -> Dict[str, Any]:
        """
        Map a partial payload to a persistence-ready document.

        Fields named in `translatable` become `{en, ar}` pairs; everything else
        passes through. Empty translatable fields are dropped, or written as
        None when `clear_empty` is set (updates clearing an optional field).
        """
        translatable = set(translatable)
        doc: Dict[str, Any] = {}
        for key, value in payload.items():
            if key not in translatable:
                doc[key] = value
                continue
            pair = self.pair(value)
            if pair is not None:
                doc[key] = pair
            elif clear_empty:
                doc[key] = None
        logger.debug("Composed bilingual fields: %s", sorted(translatable & doc.keys()))
        return doc


def get_writer(translator: Translator = Depends(get_translator)) -> BilingualWriter:
    return BilingualWriter(translator)
