# family100/questions.py

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import TypeAdapter

from family100.models import CatalogEntry

logger = logging.getLogger(__name__)


def _entry(question: str, *answers: str, points: int = 10) -> dict:
    return {"question": question, "answers": [{"text": a, "points": points} for a in answers]}


DEFAULT_QUESTIONS = [
    _entry(
        "Apa saja rukun sholat",
        "Niat", "Takbiratul Ihram", "Membaca Al-Fatihah", "Rukuk", "I'tidal",
        "Dua Sujud", "Duduk Diantara Dua Sujud", "Membaca Tasyahud",
    ),
    _entry("Apa saja najis mutawasitho?", "Kotoran", "Air Kencing", "Darah", "Bangkai"),
    _entry(
        "Apa saja penyebab batal wudhu",
        "Buang air kecil/besar", "Kentut", "Tidur", "Mabuk/Pink Sun", "Menyentuh #$@$@%",
        "Tidur dengan posisi berbaring", "Bersentuhnya antara dua kulit lawan jenis",
    ),
    _entry(
        "Apa saja rukun wudhu?",
        "Niat", "Membasuh Muka", "Membasuh kedua tangan",
        "Mengusap sebagian rambut", "Membasuh kedua kaki",
    ),
    _entry("Apa saja huruf-huruf idgham bighunnah?", "Ya'", "Wau", "Mim", "Nun"),
    _entry(
        "Apa saja jenis-jenis idgham?",
        "Idgham Bighunnah", "Idgham Bilaghunnah", "Idgham Mimi",
        "Idgham Mutamatsilain", "Idgham Mutaqarribain", "Idgham Mutajanissain",
    ),
    _entry(
        "Apa saja rukun islam?",
        "Syahadat", "Sholat", "Zakat", "Puasa Ramadhan", "Haji Bagi Mampu",
    ),
]

_entries_adapter = TypeAdapter(List[CatalogEntry])


class QuestionCatalog:
    """Read-only, cyclically indexed list of questions."""

    def __init__(self, entries: Sequence[CatalogEntry]):
        if not entries:
            raise ValueError("Question catalog must contain at least one question")
        self._entries = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> CatalogEntry:
        return self._entries[index % len(self._entries)]

    def next_index(self, index: int) -> int:
        return (index + 1) % len(self._entries)

    @classmethod
    def from_data(cls, data) -> "QuestionCatalog":
        return cls(_entries_adapter.validate_python(data))


def load_catalog(path: Optional[str] = None) -> QuestionCatalog:
    """Load the catalog from a JSON file, or fall back to the built-in questions."""
    if not path:
        return QuestionCatalog.from_data(DEFAULT_QUESTIONS)

    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    catalog = QuestionCatalog.from_data(data)
    logger.info(f"Loaded {len(catalog)} questions from {path}")
    return catalog
