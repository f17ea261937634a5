from __future__ import annotations

from types import SimpleNamespace

import pytest

TIMELINE_HTML = """
<html>
  <body>
    <div class='accordion-timeline-item' data-year='2026'>
      <div id='expand_1'>
        <div class='version-item current-version'>
          <div class='detail-timeline-title'>
            <a href='/codes/texte_lc/LEGITEXT000006071191/2026-01-07' data-date='07/01/2026'>
              Version en vigueur au 07 janvier 2026
            </a>
          </div>
          <div class='content-detail-timeline'>
            <h4 class='txt-title'><a href='/jorf/id/JORFTEXT000000000001'>Decree X</a></h4>
            <span class='tag-state-small'> has amended </span>
            <div class='list-item'>
              <ul class='list-arcticle-chrono'>
                <li><a href='/codes/article_lc/LEGIARTI000000000012'>12</a></li>
                <li><a href='/codes/article_lc/LEGIARTI000000000013'>13</a></li>
              </ul>
              <a href='/codes/section_lc/LEGITEXT000006071191/LEGISCTA000000000001'>Chapter I</a>
            </div>
          </div>
          <div class='content-detail-timeline'>
            <h4 class='txt-title'><a href='/jorf/id/JORFTEXT000000000002'>Order Y</a></h4>
            <span class='tag-state-small'>has created</span>
            <div class='list-item'>
              <ul class='list-arcticle-chrono'>
                <li><a href='/codes/article_lc/LEGIARTI000000000020'>20</a></li>
              </ul>
            </div>
          </div>
        </div>
        <div class='version-item'>
          <div class='detail-timeline-title'>
            <a href='/codes/texte_lc/LEGITEXT000006071191/2026-01-01' data-date='01/01/2026'>
              Version en vigueur au 01 janvier 2026
            </a>
          </div>
        </div>
      </div>
    </div>
    <div class='accordion-timeline-item' data-year='2025'>
      <div id='expand_2'>
        <div class='version-item'>
          <div class='detail-timeline-title'>
            <a href='/codes/texte_lc/LEGITEXT000006071191/2025-12-15' data-date='15/12/2025'>
              Version en vigueur au 15 decembre 2025
            </a>
          </div>
        </div>
      </div>
    </div>
  </body>
</html>
"""


def version_items_html(count: int, year: int = 2026) -> str:
    items = []
    for index in range(count):
        current = " current-version" if index == 0 else ""
        items.append(
            f"<div class='version-item{current}'>"
            f"<div class='detail-timeline-title'>"
            f"<a href='/codes/texte_lc/LEGITEXT/v{index}' data-date='0{index % 9 + 1}/01/{year}'>v{index}</a>"
            f"</div></div>"
        )
    return (
        f"<html><body><div class='accordion-timeline-item' data-year='{year}'>"
        f"<div id='expand_1'>{''.join(items)}</div></div></body></html>"
    )


@pytest.fixture
def timeline_html() -> str:
    return TIMELINE_HTML


@pytest.fixture
def fake_settings(tmp_path):
    return SimpleNamespace(
        LEGI_BASE_URL="https://www.legifrance.gouv.fr/",
        CHRONO_LEGI_URL="https://www.legifrance.gouv.fr/chronolegi?cidText=LEGITEXT000006071191",
        TIMELINE_SECTION_ID="expand_1",
        TIMEZONE="Europe/Paris",
        LOGS_FILE_PATH=str(tmp_path / "observed_logs.json"),
        DISCORD_TOKEN="",
        CHANNEL_ID="",
        DISCORD_API_URL="https://discord.com/api/v10",
        OWNER_ID="42",
        PING_OWNER=True,
        ALERT_MENTION_ID="42",
        SEND_IF_NO_CHANGE=True,
        NO_CHANGE_MESSAGE="Aucune modification légale détectée aujourd'hui",
        ALERT_MESSAGE="Nouvelle modification détectée",
        EMBED_COLOR=0xED938E,
        MAX_DESC_LENGTH=4000,
        CONTINUATION_SUFFIX="(cont'd)",
        GCS_BUCKET_NAME="",
        DAILY_CRON="0 22 * * *",
        HOURLY_CRON="0 * * * *",
    )


class RecordingSender:
    def __init__(self) -> None:
        self.batches: list[list[tuple]] = []

    def __call__(self, messages, settings=None):
        batch = list(messages)
        self.batches.append(batch)
        return len(batch)

    @property
    def messages(self) -> list[tuple]:
        return [message for batch in self.batches for message in batch]


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()
