"""
Version-history tracking for the hourly probe.

Every probe records the version items currently listed in the timeline's
current-year section. A new version is reported when the item count grows
compared to the previous probe.

Only the count is compared: a version item replaced in place (same number
of items, different link or content) is not reported.
"""
import datetime
import json
import logging
import os
import tempfile
import threading
from dataclasses import replace
from zoneinfo import ZoneInfo

from legi_monitor.config import settings
from legi_monitor.errors import HistoryError
from legi_monitor.models import HistoryEntry, VersionRecord
from legi_monitor.parser.markup import Markup
from legi_monitor.parser.urls import resolve_url

logger = logging.getLogger(__name__)

YEAR_SECTION = ".accordion-timeline-item[data-year='{year}'] #{section_id}"
VERSION_ITEM = ".version-item"
VERSION_TITLE_LINK = ".detail-timeline-title a"
CURRENT_VERSION_CLASS = "current-version"

_ONE_TICK = datetime.timedelta(microseconds=1)


def _utc(dt):
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt


class History:
    """
    Append-only log of probe results, backed by a JSON file.

    The whole log is rewritten on every save. Comparing against the last
    entry, appending and saving happen under one lock so the daily and
    hourly jobs can share a single instance.
    """

    def __init__(self, path, on_saved=None):
        self.path = path
        self.on_saved = on_saved
        self._entries = []
        self._lock = threading.RLock()

    def __len__(self):
        with self._lock:
            return len(self._entries)

    @property
    def entries(self):
        with self._lock:
            return tuple(self._entries)

    def last(self):
        with self._lock:
            return self._entries[-1] if self._entries else None

    def load(self):
        """
        Load the history file, creating it with an empty list when absent.

        An unreadable file is moved aside to `<path>.corrupt` and the history
        starts empty rather than failing startup.

        Returns:
            int: number of entries loaded
        """
        if not os.path.exists(self.path):
            try:
                os.makedirs(os.path.dirname(self.path) or '.', exist_ok=True)
                with open(self.path, "w", encoding="utf-8") as f:
                    f.write("[]")
            except OSError as e:
                logger.warning(f"Could not create history file {self.path}: {e}")

        try:
            entries = _read_entries(self.path)
        except HistoryError as e:
            logger.warning(f"No usable history file, starting fresh: {e}")
            self._set_aside()
            entries = []

        with self._lock:
            self._entries = entries
        logger.info(f"Loaded {len(entries)} logs from {self.path}")
        return len(entries)

    def _set_aside(self):
        if not os.path.exists(self.path):
            return
        corrupt_path = f"{self.path}.corrupt"
        try:
            os.replace(self.path, corrupt_path)
            logger.warning(f"Moved unreadable history to {corrupt_path}")
        except OSError as e:
            logger.error(f"Could not move {self.path} aside: {e}")

    def append(self, entry):
        """
        Append *entry*, keeping log dates strictly increasing.

        An entry stamped at or before the last one is moved one microsecond
        after it.

        Returns:
            HistoryEntry: the entry actually stored
        """
        with self._lock:
            entry = replace(entry, log_date=_utc(entry.log_date))
            if self._entries and entry.log_date <= self._entries[-1].log_date:
                entry = replace(entry, log_date=self._entries[-1].log_date + _ONE_TICK)
            self._entries.append(entry)
            return entry

    def save(self):
        """
        Rewrite the whole history file.

        Returns:
            bool: True if saved. A failed save keeps the in-memory entries,
            so the next successful save still contains them.
        """
        with self._lock:
            payload = json.dumps(
                [entry.to_dict() for entry in self._entries],
                indent=2,
                ensure_ascii=False,
            )
            count = len(self._entries)
            directory = os.path.dirname(os.path.abspath(self.path))
            tmp_path = None
            try:
                fd, tmp_path = tempfile.mkstemp(
                    dir=directory, prefix=".history-", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, self.path)
            except OSError as e:
                logger.error(f"Error saving logs to {self.path}: {e}")
                if tmp_path and os.path.exists(tmp_path):
                    os.remove(tmp_path)
                return False

        logger.info(f"Saved {count} logs to {self.path}")
        if self.on_saved is not None:
            self.on_saved(self.path)
        return True

    def should_notify(self, item_count):
        """True when a previous probe exists and saw fewer version items."""
        last = self.last()
        return last is not None and len(last.version_items) < item_count

    def record(self, version_items, log_date):
        """
        Compare, append and persist one probe result as a single unit.

        Returns:
            (HistoryEntry, bool): the stored entry and whether a new
            version was published since the previous probe.
        """
        with self._lock:
            notify = self.should_notify(len(version_items))
            entry = self.append(
                HistoryEntry(log_date=log_date, version_items=tuple(version_items))
            )
            self.save()
        return entry, notify


def _read_entries(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise HistoryError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, list):
        raise HistoryError(f"{path} does not contain a JSON array")

    try:
        return [HistoryEntry.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        raise HistoryError(f"Malformed entry in {path}: {e}") from e


def extract_version_items(html, year, captured_at, base_url=None, section_id=None):
    """
    Collect the version items of the timeline section for *year*.

    Items outside that accordion section are ignored.

    Returns:
        list[VersionRecord]: one record per item, in document order
    """
    if base_url is None:
        base_url = settings.LEGI_BASE_URL
    if section_id is None:
        section_id = settings.TIMELINE_SECTION_ID

    doc = Markup(html)
    section = doc.find_first(YEAR_SECTION.format(year=year, section_id=section_id))
    if section is None:
        return []

    records = []
    for item in doc.find_all(VERSION_ITEM, section):
        date_link = doc.find_first(VERSION_TITLE_LINK, item)
        records.append(VersionRecord(
            captured_at=captured_at,
            is_current_version=doc.has_class(item, CURRENT_VERSION_CLASS),
            date_link=resolve_url(base_url, doc.attr(date_link, 'href')),
            raw_fragment=doc.inner_html(item),
        ))
    return records


def probe(html, history, year=None, captured_at=None, base_url=None, section_id=None):
    """
    Record the version items currently listed and decide whether a new
    version has been published.

    Args:
        html:        rendered timeline markup
        history:     shared History instance, appended to and saved
        year:        timeline year to scope the lookup (defaults to the
                     year of *captured_at* in the monitor timezone)
        captured_at: probe timestamp (defaults to now, UTC)

    Returns:
        (HistoryEntry | None, bool): the new entry and the notify flag.
        (None, False) when no version item was found; history is left
        untouched in that case.
    """
    if captured_at is None:
        captured_at = datetime.datetime.now(datetime.timezone.utc)
    captured_at = _utc(captured_at)
    if year is None:
        year = captured_at.astimezone(ZoneInfo(settings.TIMEZONE)).year

    items = extract_version_items(
        html, year, captured_at, base_url=base_url, section_id=section_id
    )
    if not items:
        logger.info(f"No version items found for {year}, probe skipped")
        return None, False

    entry, notify = history.record(items, captured_at)
    logger.info(
        f"Probe recorded {len(items)} version item(s) at "
        f"{entry.log_date.isoformat()} (new version: {notify})"
    )
    return entry, notify
