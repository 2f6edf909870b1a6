"""Lexical knowledge base — keyword tables loaded once from packaged JSON.

The JSON files are validated with pydantic and frozen into an immutable
``KnowledgeBase`` that is passed by reference into the rule classifier.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from triage.domain.value_objects.enums import Language, RequestType

logger = logging.getLogger(__name__)

DICTIONARIES_DIR = Path(__file__).parent / "dictionaries"

LANGUAGE_FILES: dict[Language, str] = {
    Language.RU: "ru.json",
    Language.KZ: "kz.json",
    Language.ENG: "eng.json",
}
SIGNALS_FILE = "signals.json"


class LanguageDictionaryFile(BaseModel):
    """Schema of ru.json / kz.json / eng.json."""

    model_config = ConfigDict(populate_by_name=True)

    language_markers: list[str] = Field(default_factory=list, alias="languageMarkers")
    request_types: dict[str, list[str] | None] = Field(default_factory=dict, alias="requestTypes")
    positive_tone: list[str] = Field(default_factory=list, alias="positiveTone")
    negative_tone: list[str] = Field(default_factory=list, alias="negativeTone")


class LanguageSignalsFile(BaseModel):
    """Schema of signals.json."""

    model_config = ConfigDict(populate_by_name=True)

    kazakh_latin_signals: list[str] = Field(default_factory=list, alias="kazakhLatinSignals")
    russian_latin_signals: list[str] = Field(default_factory=list, alias="russianLatinSignals")
    kazakh_specific_letters: list[str] = Field(default_factory=list, alias="kazakhSpecificLetters")


@dataclass(frozen=True)
class KnowledgeBase:
    language_markers: Mapping[Language, frozenset[str]]
    request_type_keywords: Mapping[Language, Mapping[RequestType, tuple[str, ...]]]
    positive_tone: Mapping[Language, tuple[str, ...]]
    negative_tone: Mapping[Language, tuple[str, ...]]
    kazakh_latin_signals: frozenset[str]
    russian_latin_signals: frozenset[str]
    kazakh_specific_letters: frozenset[str]


def _lowered(words: list[str] | None) -> tuple[str, ...]:
    return tuple(w.lower() for w in (words or []) if w and w.strip())


def _read(directory: Path, file_name: str, schema: type[BaseModel]) -> BaseModel:
    path = directory / file_name
    if not path.is_file():
        raise FileNotFoundError(f"Dictionary file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return schema.model_validate(json.load(f))


def _request_type_map(raw: dict[str, list[str] | None]) -> Mapping[RequestType, tuple[str, ...]]:
    mapping: dict[RequestType, tuple[str, ...]] = {}
    for type_name, keywords in raw.items():
        request_type = RequestType.from_name(type_name)
        if request_type is None:
            logger.warning("Unknown request type '%s' in dictionary, ignoring", type_name)
            continue
        mapping[request_type] = _lowered(keywords)
    # Every type present, in enum order (scoring tie-break order).
    return MappingProxyType({rt: mapping.get(rt, ()) for rt in RequestType})


def load_knowledge_base(directory: Path | None = None) -> KnowledgeBase:
    """Build a KnowledgeBase from the dictionary JSON files in *directory*.

    Raises:
        FileNotFoundError: a dictionary file is missing.
        pydantic.ValidationError: a dictionary file does not match its schema.
    """
    directory = directory or DICTIONARIES_DIR

    markers: dict[Language, frozenset[str]] = {}
    keywords: dict[Language, Mapping[RequestType, tuple[str, ...]]] = {}
    positive: dict[Language, tuple[str, ...]] = {}
    negative: dict[Language, tuple[str, ...]] = {}

    for language, file_name in LANGUAGE_FILES.items():
        dto = _read(directory, file_name, LanguageDictionaryFile)
        markers[language] = frozenset(_lowered(dto.language_markers))
        keywords[language] = _request_type_map(dto.request_types)
        positive[language] = _lowered(dto.positive_tone)
        negative[language] = _lowered(dto.negative_tone)

    signals = _read(directory, SIGNALS_FILE, LanguageSignalsFile)

    kb = KnowledgeBase(
        language_markers=MappingProxyType(markers),
        request_type_keywords=MappingProxyType(keywords),
        positive_tone=MappingProxyType(positive),
        negative_tone=MappingProxyType(negative),
        kazakh_latin_signals=frozenset(_lowered(signals.kazakh_latin_signals)),
        russian_latin_signals=frozenset(_lowered(signals.russian_latin_signals)),
        kazakh_specific_letters=frozenset("".join(signals.kazakh_specific_letters).lower()),
    )
    logger.info("Knowledge base loaded from %s", directory)
    return kb


@lru_cache(maxsize=1)
def default_knowledge_base() -> KnowledgeBase:
    """The packaged knowledge base, loaded once per process."""
    return load_knowledge_base()
