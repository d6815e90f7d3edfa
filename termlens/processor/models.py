# termlens/processor/models.py
from dataclasses import dataclass
from typing import Optional


@dataclass
class RawDocument:
    """Lo que sale de cualquier Parser: texto plano saneado + metadata."""
    title:       str
    source_path: str
    text:        str
    page_count:  Optional[int] = None   # solo PDF
