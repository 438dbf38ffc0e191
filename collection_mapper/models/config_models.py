from __future__ import annotations

from dataclasses import dataclass, field

from .classification import ClassificationPolicy

"""Config dataclasses for the collection mapper.

These are the typed form of config/mapper.yml once loaded and validated by
collection_mapper.config.loader.
"""

__all__ = [
    "MapperConfig",
]


@dataclass(frozen=True)
class MapperConfig:
    """Root configuration object for a mapping run.

    classification_policy is mandatory, see ClassificationPolicy.
    """
    source_directory: str  # Directory scanned for .xlsx files
    classification_policy: ClassificationPolicy
    output_directory: str = "./output"  # collections-*.jsonl destination
    sheets: list[str] | None = None  # None = every sheet of every workbook
    header_row: int = 1  # 1-based physical row holding the headers
    column_aliases: dict[str, list[str]] = field(default_factory=dict)  # field -> extra headers
    null_sentinels: set[str] | None = None  # upper-cased strings read as empty cells
