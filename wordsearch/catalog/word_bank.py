"""
Curated word bank access.

The bank lives in `data/word_bank.yaml`: words per language and category,
localized category names, world names and trophy text. Category order and
word order are part of level identity, so the loader preserves both.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
DATA_PATH = Path(__file__).parent / "data" / "word_bank.yaml"

_WORD_RE = re.compile(r"^[A-Z]+$")


class TrophyText(BaseModel):
    """Format strings for trophy name and description ({world} placeholder)."""
    title: str
    description: str


class WordBank(BaseModel):
    """Words and localized labels for every supported language."""
    categories: Dict[str, Dict[str, List[str]]]
    category_names: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    world_names: Dict[str, List[str]] = Field(default_factory=dict)
    trophy_text: Dict[str, TrophyText] = Field(default_factory=dict)

    @property
    def languages(self) -> List[str]:
        return list(self.categories)

    def resolve_language(self, language: Optional[str]) -> str:
        """Fall back to the default language for unknown codes."""
        if language in self.categories:
            return language
        return DEFAULT_LANGUAGE

    def category_keys(self) -> List[str]:
        """Ordered category keys (shared by all languages)."""
        return list(self.categories[DEFAULT_LANGUAGE])

    def words(self, category: str, language: Optional[str] = None) -> List[str]:
        """Words of one category in bank order."""
        lang = self.resolve_language(language)
        return list(self.categories[lang].get(category, []))

    def category_name(self, category: str, language: Optional[str] = None) -> str:
        """Localized category label, falling back to English, then the key."""
        lang = self.resolve_language(language)
        names = self.category_names.get(lang, {})
        if category in names:
            return names[category]
        return self.category_names.get(DEFAULT_LANGUAGE, {}).get(category, category)

    def world_name(self, block_index: int, language: Optional[str] = None) -> str:
        """World name for a block, cycling through the list."""
        lang = self.resolve_language(language)
        names = self.world_names.get(lang) or self.world_names[DEFAULT_LANGUAGE]
        return names[block_index % len(names)]

    def trophy(self, language: Optional[str] = None) -> TrophyText:
        lang = self.resolve_language(language)
        return self.trophy_text.get(lang) or self.trophy_text[DEFAULT_LANGUAGE]


def clean_words(words: List[str]) -> List[str]:
    """Keep grid-safe A-Z words, dropping repeats but preserving order."""
    seen = set()
    cleaned = []
    for word in words:
        word = str(word).strip().upper()
        if not _WORD_RE.match(word):
            logger.debug("Dropping non A-Z word '%s' from word bank", word)
            continue
        if word in seen:
            continue
        seen.add(word)
        cleaned.append(word)
    return cleaned


def load_word_bank(path: Optional[Path] = None) -> WordBank:
    """
    Load and clean a word bank YAML file.

    Args:
        path: YAML file (defaults to the bundled bank)

    Returns:
        Validated WordBank

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path) if path is not None else DATA_PATH

    if not path.exists():
        raise FileNotFoundError(f"Word bank not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    bank = WordBank(**data)
    for lang, categories in bank.categories.items():
        for category, words in categories.items():
            categories[category] = clean_words(words)

    if DEFAULT_LANGUAGE not in bank.categories:
        raise ValueError(f"Word bank must define the '{DEFAULT_LANGUAGE}' language")

    logger.debug("Loaded word bank from %s (%s)", path, ", ".join(bank.languages))
    return bank


_default_bank: Optional[WordBank] = None


def get_word_bank() -> WordBank:
    """The bundled word bank, loaded on first use."""
    global _default_bank
    if _default_bank is None:
        _default_bank = load_word_bank()
    return _default_bank
