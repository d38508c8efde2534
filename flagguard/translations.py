"""
flagguard Translation Sets (i18n) for validator messages.

Resolution chain: explicit lang → ExecutionContext.preferred_language →
"en" (mandatory default) → key name.

Usage:
    from flagguard.translations import validator_messages

    validator_messages.get("duplicate_guarded_value", lang="fr",
                           class_name="Poll", attribute="is_promoted", unique_bool="true")

    # Translator callable expected by validators: (key, params) -> str
    translator = validator_messages.translate
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from flagguard.engine.context import get_preferred_language

logger = logging.getLogger("flagguard.translations")

DEFAULT_LANGUAGE = "en"


class TranslationSet:
    """A named set of {key: {lang: template}} messages."""

    def __init__(
        self,
        name: str,
        loader: Callable[[], Dict[str, Dict[str, str]]],
    ):
        self.name = name
        self._loader = loader
        self._data: Dict[str, Dict[str, str]] = {}

    def _messages(self) -> Dict[str, Dict[str, str]]:
        if not self._data:
            self._data.update(self._loader())
        return self._data

    def get(self, key: str, lang: Optional[str] = None, **params: Any) -> str:
        translations = self._messages().get(key, {})
        if not translations:
            return key

        if lang is None:
            lang = get_preferred_language()

        text = translations.get(lang, translations.get(DEFAULT_LANGUAGE, key))

        if params:
            try:
                text = text.format(**params)
            except (KeyError, IndexError):
                logger.warning(f"Missing parameter for '{self.name}.{key}' ({lang})")

        return text

    def translate(self, key: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Translator-protocol adapter: (key, params) -> text."""
        return self.get(key, **dict(params or {}))

    def ref(self, key: str) -> Dict[str, Any]:
        """Lazy reference, resolved by the host at render time."""
        return {"_type": "translation_ref", "set": self.name, "key": key}

    def languages(self, key: str) -> list:
        return sorted(self._messages().get(key, {}))


def _validator_messages() -> Dict[str, Dict[str, str]]:
    return {
        "duplicate_guarded_value": {
            "en": (
                "There's already a {class_name} with '{attribute}' set to '{unique_bool}'. "
                "Please update the other one and try again."
            ),
            "fr": (
                "Il existe déjà un(e) {class_name} avec '{attribute}' défini à '{unique_bool}'. "
                "Veuillez modifier l'autre et réessayer."
            ),
            "es": (
                "Ya existe un(a) {class_name} con '{attribute}' establecido en '{unique_bool}'. "
                "Actualice el otro e inténtelo de nuevo."
            ),
        },
        "save_rejected": {
            "en": "{count} validation error(s) prevented saving.",
            "fr": "{count} erreur(s) de validation ont empêché l'enregistrement.",
            "es": "{count} error(es) de validación impidieron guardar.",
        },
    }


validator_messages = TranslationSet("validator_messages", _validator_messages)
