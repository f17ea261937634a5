"""
Data model for the ChronoLegi monitor.

Snapshot types (ArticleGroup, ModificationEvent, ParsedSnapshot) are produced
by the parser and never modified afterwards. VersionRecord and HistoryEntry
make up the append-only probe log, and know how to round-trip through the
JSON history file.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class ArticleGroup:
    article_numbers: tuple[str, ...] = ()
    article_urls: tuple[str, ...] = ()
    section_name: str = ""
    section_url: str = ""

    def __post_init__(self) -> None:
        if len(self.article_numbers) != len(self.article_urls):
            raise ValueError(
                f"article_numbers ({len(self.article_numbers)}) and "
                f"article_urls ({len(self.article_urls)}) must be index-aligned"
            )

    def links(self) -> list[tuple[str, str]]:
        return list(zip(self.article_numbers, self.article_urls))


@dataclass(frozen=True, slots=True)
class ModificationEvent:
    title: str
    url: str
    action: str = ""
    articles: tuple[ArticleGroup, ...] = ()


@dataclass(frozen=True, slots=True)
class ParsedSnapshot:
    date: str
    date_url: str
    modifications: tuple[ModificationEvent, ...] = ()


def parse_log_date(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting the trailing 'Z' form."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class VersionRecord:
    captured_at: datetime
    is_current_version: bool
    date_link: str = ""
    raw_fragment: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "isCurrentVersion": self.is_current_version,
            "dateLink": self.date_link,
            "savedHtml": self.raw_fragment,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], captured_at: datetime) -> VersionRecord:
        return cls(
            captured_at=captured_at,
            is_current_version=bool(data.get("isCurrentVersion", False)),
            date_link=data.get("dateLink") or "",
            raw_fragment=data.get("savedHtml") or "",
        )


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    log_date: datetime
    version_items: tuple[VersionRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "log_date": self.log_date.astimezone(timezone.utc).isoformat(),
            "versionItems": [item.to_dict() for item in self.version_items],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HistoryEntry:
        log_date = parse_log_date(str(data["log_date"]))
        items = tuple(
            VersionRecord.from_dict(item, captured_at=log_date)
            for item in data.get("versionItems") or []
        )
        return cls(log_date=log_date, version_items=items)

    def current_version(self) -> VersionRecord | None:
        for item in self.version_items:
            if item.is_current_version:
                return item
        return None
