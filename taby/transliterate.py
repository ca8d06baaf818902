"""
Phonetic transliteration for search.

A transliterator turns text into a full phonetic spelling and an initials-only
abbreviation, so "百度" can be found by typing "baidu" or "bd". Deployments that
don't need it use NullTransliterator.
"""
import logging
import re
import unicodedata
from abc import ABC, abstractmethod
from typing import NamedTuple

from pypinyin import Style, lazy_pinyin

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class PhoneticProjection(NamedTuple):
    full: str
    initials: str

    def as_field(self) -> str:
        """Both forms in one searchable string, e.g. ``"baidu bd"``."""
        return f"{self.full} {self.initials}".strip()


def normalize_phonetic(text: str) -> str:
    """Strip diacritics and whitespace, lowercase."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub("", stripped).lower()


class Transliterator(ABC):
    """Base class for phonetic engines."""

    name = "base"

    @abstractmethod
    def project(self, text: str) -> PhoneticProjection:
        """Full spelling and initials of ``text``, both normalized."""
        pass

    def phonetic_field(self, text: str) -> str:
        """
        Searchable phonetic form of ``text``.

        Empty input gives an empty string; if the engine fails, the original
        text is returned unchanged.
        """
        if not text:
            return ""
        try:
            return self.project(text).as_field()
        except Exception as e:
            logger.warning(f"{self.name} transliteration failed for {text!r}: {e}")
            return text


class NullTransliterator(Transliterator):
    name = "none"

    def project(self, text: str) -> PhoneticProjection:
        return PhoneticProjection("", "")


class PinyinTransliterator(Transliterator):
    """Chinese to pinyin via pypinyin; non-Chinese text projects to nothing."""

    name = "pinyin"

    def project(self, text: str) -> PhoneticProjection:
        full = lazy_pinyin(text, style=Style.NORMAL, errors="ignore")
        initials = lazy_pinyin(text, style=Style.FIRST_LETTER, errors="ignore")
        return PhoneticProjection(
            normalize_phonetic("".join(full)),
            normalize_phonetic("".join(initials)),
        )


TRANSLITERATORS = {
    NullTransliterator.name: NullTransliterator,
    PinyinTransliterator.name: PinyinTransliterator,
}


def get_transliterator(name: str) -> Transliterator:
    """Look up a transliterator by its config name."""
    try:
        return TRANSLITERATORS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown transliteration '{name}'. Choose from: {', '.join(sorted(TRANSLITERATORS))}"
        ) from None
