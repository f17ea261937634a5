import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ==============================================================================
# CHRONOLEGI MONITORING CONFIGURATION
# ==============================================================================

# Site root used to resolve the relative links found in the timeline
LEGI_BASE_URL = os.getenv('LEGI_BASE_URL', "https://www.legifrance.gouv.fr/")

# Timeline of the tracked code (Code du travail by default). The date-range
# query parameters are appended at fetch time.
CHRONO_LEGI_URL = os.getenv(
    'CHRONO_LEGI_URL',
    "https://www.legifrance.gouv.fr/chronolegi?cidText=LEGITEXT000006071191&libText=-&type=CODE&navigation=true"
)

# id of the expandable accordion block holding the current year's versions
TIMELINE_SECTION_ID = os.getenv('TIMELINE_SECTION_ID', "expand_1")

# Headless browser page load budget, in seconds
FETCH_TIMEOUT = int(os.getenv('FETCH_TIMEOUT', "30"))
USER_AGENT = os.getenv('USER_AGENT', "Mozilla/5.0 (Windows NT 10.0; Win64; x64)")

# Append-only probe history, rewritten in full after every hourly probe
LOGS_FILE_PATH = os.getenv('LOGS_FILE_PATH', "observed_logs.json")

# ==============================================================================
# SCHEDULE CONFIGURATION
# ==============================================================================

TIMEZONE = os.getenv('TIMEZONE', "Europe/Paris")
DAILY_CRON = os.getenv('DAILY_CRON', "0 22 * * *")
HOURLY_CRON = os.getenv('HOURLY_CRON', "0 * * * *")

LOG_FILE = os.getenv('LOG_FILE', "scheduler.log")
PORT = int(os.getenv('PORT', "8080"))

# ==============================================================================
# DISCORD CONFIGURATION
# ==============================================================================

DISCORD_TOKEN = os.getenv('DISCORD_TOKEN', "")
CHANNEL_ID = os.getenv('CHANNEL_ID', "")
DISCORD_API_URL = os.getenv('DISCORD_API_URL', "https://discord.com/api/v10")

# Mentioned on the first message of the daily report
OWNER_ID = os.getenv('OWNER_ID', "")
PING_OWNER = _env_flag('PING_OWNER', True)

# Mentioned on the hourly "new version" alert (falls back to OWNER_ID)
ALERT_MENTION_ID = os.getenv('ALERT_MENTION_ID', "") or OWNER_ID

SEND_IF_NO_CHANGE = _env_flag('SEND_IF_NO_CHANGE', True)
NO_CHANGE_MESSAGE = os.getenv('NO_CHANGE_MESSAGE', "Aucune modification légale détectée aujourd'hui")
ALERT_MESSAGE = os.getenv('ALERT_MESSAGE', "Nouvelle modification détectée")

EMBED_COLOR = int(os.getenv('EMBED_COLOR', "0xED938E"), 16)
MAX_DESC_LENGTH = int(os.getenv('MAX_DESC_LENGTH', "4000"))
CONTINUATION_SUFFIX = os.getenv('CONTINUATION_SUFFIX', "(cont'd)")

# ==============================================================================
# CLOUD STORAGE (Optional)
# ==============================================================================

# When set, the history file is mirrored to gs://<bucket>/history/
GCS_BUCKET_NAME = os.getenv('GCS_BUCKET_NAME', "")

# ==============================================================================
# NOTES FOR DEPLOYMENT
# ==============================================================================
#
# All values above can be set in the environment or in a local .env file.
# DISCORD_TOKEN and CHANNEL_ID are required to actually post; without them
# messages are only written to the log.
#
# ==============================================================================
