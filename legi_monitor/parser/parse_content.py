import datetime
import logging
from zoneinfo import ZoneInfo

from legi_monitor.config import settings
from legi_monitor.models import ArticleGroup, ModificationEvent, ParsedSnapshot
from legi_monitor.parser.markup import Markup
from legi_monitor.parser.urls import resolve_url

logger = logging.getLogger(__name__)

# Selectors of the ChronoLegi timeline markup
VERSION_LINK_FOR_DATE = ".version-item a[data-date='{date}']"
CURRENT_VERSION = ".version-item.current-version"
VERSION_TITLE_LINK = ".detail-timeline-title a"
MODIFICATION_BLOCK = ".content-detail-timeline"
MODIFICATION_TITLE_LINK = "h4.txt-title a"
MODIFICATION_ACTION = ".tag-state-small"
ARTICLE_GROUP = ".list-item"
# "arcticle" is the site's own spelling
ARTICLE_LINK = ".list-arcticle-chrono li a"
SECTION_LINK = "a[href*='section_lc']"


def today(tz_name=None):
    """Current calendar date in the monitor's timezone."""
    return datetime.datetime.now(ZoneInfo(tz_name or settings.TIMEZONE)).date()


def format_reference_date(day):
    """Format a date the way the timeline's data-date attribute does (DD/MM/YYYY)."""
    return day.strftime("%d/%m/%Y")


def parse_legi_data(html, reference_date=None, base_url=None):
    """
    Extract the modifications published for *reference_date* from the
    rendered ChronoLegi timeline.

    Args:
        html:           rendered page markup
        reference_date: date a published version is expected for
                        (defaults to today in the configured timezone)
        base_url:       site root used to resolve relative links

    Returns:
        ParsedSnapshot, or None when no version was published that day or
        the current-version container is missing.
    """
    if reference_date is None:
        reference_date = today()
    if base_url is None:
        base_url = settings.LEGI_BASE_URL

    doc = Markup(html)

    # Is there a version for the reference date at all?
    date_label = format_reference_date(reference_date)
    if not doc.exists(VERSION_LINK_FOR_DATE.format(date=date_label)):
        logger.info(f"No version published for {date_label}")
        return None

    container = doc.find_first(CURRENT_VERSION)
    if container is None:
        logger.warning(
            f"Version marker found for {date_label} but no current-version "
            f"container in the page"
        )
        return None

    date_link = doc.find_first(VERSION_TITLE_LINK, container)
    date = doc.text(date_link)
    date_url = resolve_url(base_url, doc.attr(date_link, 'href'))

    modifications = []
    for block in doc.find_all(MODIFICATION_BLOCK, container):
        event = _parse_modification(doc, block, base_url)
        if event is not None:
            modifications.append(event)

    logger.info(f"Parsed {len(modifications)} modification(s) for {date or date_label}")
    return ParsedSnapshot(
        date=date,
        date_url=date_url,
        modifications=tuple(modifications),
    )


def _parse_modification(doc, block, base_url):
    """Build one ModificationEvent, or None when the block has no title link."""
    title_link = doc.find_first(MODIFICATION_TITLE_LINK, block)
    if title_link is None:
        return None

    articles = tuple(
        _parse_article_group(doc, item, base_url)
        for item in doc.find_all(ARTICLE_GROUP, block)
    )

    return ModificationEvent(
        title=doc.text(title_link),
        url=resolve_url(base_url, doc.attr(title_link, 'href')),
        action=doc.text(doc.find_first(MODIFICATION_ACTION, block)),
        articles=articles,
    )


def _parse_article_group(doc, item, base_url):
    numbers = []
    urls = []
    for link in doc.find_all(ARTICLE_LINK, item):
        numbers.append(doc.text(link))
        urls.append(resolve_url(base_url, doc.attr(link, 'href')))

    section_link = doc.find_first(SECTION_LINK, item)
    if section_link is not None:
        section_name = doc.text(section_link)
        section_url = resolve_url(base_url, doc.attr(section_link, 'href'))
    else:
        section_name = ""
        section_url = ""

    return ArticleGroup(
        article_numbers=tuple(numbers),
        article_urls=tuple(urls),
        section_name=section_name,
        section_url=section_url,
    )
