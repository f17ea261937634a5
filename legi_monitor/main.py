from legi_monitor.config import settings
from legi_monitor.fetcher.fetch_page import fetch_chrono_page
from legi_monitor.parser.parse_content import parse_legi_data, today
from legi_monitor.comparator.version_tracker import History, probe
from legi_monitor.notifier.format_embeds import format_embeds
from legi_monitor.notifier.send_discord import mention, send_messages
from legi_monitor.storage.gcs_storage import is_gcs_enabled, download_history, upload_history
from legi_monitor.errors import FetchError, StorageError
import argparse
import datetime
import logging
import sys

logger = logging.getLogger(__name__)


def build_history(settings=settings):
    """
    Load the probe history once at startup.

    With Cloud Storage enabled the remote copy is pulled first and every
    successful save is pushed back. If the pull fails, this process never
    uploads, so a partial local log cannot replace the remote one.
    """
    on_saved = None
    if is_gcs_enabled(settings.GCS_BUCKET_NAME):
        logger.info("[*] Cloud Storage enabled, downloading history...")
        try:
            download_history(settings.LOGS_FILE_PATH, settings.GCS_BUCKET_NAME)
        except StorageError as e:
            logger.error(f"[X] History download failed, uploads disabled for this run: {e}")
        else:
            def on_saved(path):
                upload_history(path, settings.GCS_BUCKET_NAME)
    else:
        logger.info("[*] Using local filesystem for history")

    history = History(settings.LOGS_FILE_PATH, on_saved=on_saved)
    history.load()
    return history


def build_daily_messages(snapshot, settings=settings, timestamp=None):
    """
    Turn a parsed snapshot into (content, embed) pairs, the owner mention
    riding on the first one.

    Returns an empty list when there is nothing to report.
    """
    if snapshot is None:
        return []

    chunks = format_embeds(
        snapshot,
        max_chunk_chars=settings.MAX_DESC_LENGTH,
        timestamp=timestamp,
        color=settings.EMBED_COLOR,
        continuation_suffix=settings.CONTINUATION_SUFFIX,
    )

    messages = []
    for index, chunk in enumerate(chunks):
        content = None
        if index == 0 and settings.PING_OWNER:
            content = mention(settings.OWNER_ID) or None
        messages.append((content, chunk.to_embed()))
    return messages


def build_alert_message(entry, settings=settings):
    """Single-line alert for a newly published version, with its link when known."""
    text = settings.ALERT_MESSAGE
    who = mention(settings.ALERT_MENTION_ID)
    if who:
        text = f"{text} {who}"
    current = entry.current_version()
    if current is not None and current.date_link:
        text = f"{text}\n{current.date_link}"
    return text


def process_legi_updates(settings=settings, fetch=fetch_chrono_page, send=send_messages,
                         reference_date=None, timestamp=None):
    """
    Daily report: fetch the timeline, extract today's modifications and
    post them, or post the "no change" notice.

    Returns:
        dict: run summary with 'status' in
        ('published', 'no_change', 'aborted')
    """
    reference_date = reference_date or today(settings.TIMEZONE)
    logger.info(f"Daily report for {reference_date.isoformat()}")

    try:
        html = fetch(day=reference_date)
    except FetchError as e:
        logger.error(f"[X] Daily report aborted, fetch failed: {e}")
        return {'status': 'aborted', 'error': str(e)}

    snapshot = parse_legi_data(html, reference_date, settings.LEGI_BASE_URL)
    messages = build_daily_messages(snapshot, settings, timestamp)

    if messages:
        delivered = send(messages, settings=settings)
        logger.info(f"[+] Sent {delivered}/{len(messages)} message(s) for {snapshot.date}")
        return {
            'status': 'published',
            'date': snapshot.date,
            'modifications': len(snapshot.modifications),
            'messages': len(messages),
            'delivered': delivered,
        }

    logger.info(f"{settings.NO_CHANGE_MESSAGE} {reference_date.isoformat()}")
    delivered = 0
    if settings.SEND_IF_NO_CHANGE:
        delivered = send([(settings.NO_CHANGE_MESSAGE, None)], settings=settings)
    return {'status': 'no_change', 'messages': int(settings.SEND_IF_NO_CHANGE), 'delivered': delivered}


def process_log_updates(history, settings=settings, fetch=fetch_chrono_page, send=send_messages,
                        captured_at=None):
    """
    Hourly probe: record the current version items and alert when a new
    version appeared since the previous probe.

    Returns:
        dict: run summary with 'status' in
        ('recorded', 'no_items', 'aborted')
    """
    captured_at = captured_at or datetime.datetime.now(datetime.timezone.utc)

    try:
        html = fetch()
    except FetchError as e:
        logger.error(f"[X] Probe aborted, fetch failed: {e}")
        return {'status': 'aborted', 'error': str(e)}

    entry, notify = probe(
        html,
        history,
        captured_at=captured_at,
        base_url=settings.LEGI_BASE_URL,
        section_id=settings.TIMELINE_SECTION_ID,
    )
    if entry is None:
        return {'status': 'no_items'}

    delivered = 0
    if notify:
        logger.info("[+] New version detected, sending alert")
        delivered = send([(build_alert_message(entry, settings), None)], settings=settings)

    return {
        'status': 'recorded',
        'notify': notify,
        'version_items': len(entry.version_items),
        'delivered': delivered,
    }


def _parse_date(value):
    try:
        return datetime.datetime.strptime(value, "%d/%m/%Y").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected DD/MM/YYYY, got {value!r}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Run one ChronoLegi check and post the result to Discord."
    )
    parser.add_argument('--date', type=_parse_date,
                        help="reference date DD/MM/YYYY for the daily report (default: today)")
    parser.add_argument('--probe', action='store_true',
                        help="run the hourly version probe instead of the daily report")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.probe:
        result = process_log_updates(build_history(settings), settings)
    else:
        result = process_legi_updates(settings, reference_date=args.date)

    logger.info(f"Run finished: {result}")
    return 1 if result['status'] == 'aborted' else 0


if __name__ == "__main__":
    sys.exit(main())
