"""
Render a parsed snapshot as Discord embeds.

Each modification becomes one markdown block. Blocks are packed into
embeds whose description stays under the configured length; a block is
never split across two embeds.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any

from legi_monitor.config import settings
from legi_monitor.models import ModificationEvent, ParsedSnapshot

DEFAULT_ICON = "📄"

# Evaluated in order, first keyword contained in the action wins
ACTION_ICONS = (
    ("modifié", "📝"),
    ("amended", "📝"),
    ("créé", "✨"),
    ("created", "✨"),
    ("abrogé", "❌"),
    ("repealed", "❌"),
)


@dataclass(frozen=True)
class MessageChunk:
    title: str
    url: str
    color: int
    timestamp: datetime.datetime
    description: str

    def to_embed(self) -> dict[str, Any]:
        embed = {
            "title": self.title,
            "color": self.color,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
        }
        # Discord rejects an empty embed url
        if self.url:
            embed["url"] = self.url
        return embed


def action_icon(action: str, table=ACTION_ICONS) -> str:
    for keyword, icon in table:
        if keyword in action:
            return icon
    return DEFAULT_ICON


def render_article_group(group) -> str:
    links = ", ".join(f"[{number}]({url})" for number, url in group.links())
    line = f"• Article {links}"
    if group.section_name:
        line += f" - [{group.section_name}]({group.section_url})"
    return line + "\n"


def render_modification(event: ModificationEvent) -> str:
    """Markdown block for one modification: header, action, one line per article group."""
    block = f"\n### {action_icon(event.action)} [{event.title}]({event.url})"
    block += f"\n*{event.action}*\n"
    for group in event.articles:
        block += render_article_group(group)
    return block


def format_embeds(
    snapshot: ParsedSnapshot,
    max_chunk_chars: int | None = None,
    timestamp: datetime.datetime | None = None,
    color: int | None = None,
    continuation_suffix: str | None = None,
) -> list[MessageChunk]:
    """
    Pack the snapshot's modifications into size-bounded chunks.

    Continuation chunks get the suffix appended to their title and keep the
    same link, colour and timestamp. An empty snapshot gives no chunks.
    """
    if max_chunk_chars is None:
        max_chunk_chars = settings.MAX_DESC_LENGTH
    if timestamp is None:
        timestamp = datetime.datetime.now(datetime.timezone.utc)
    if color is None:
        color = settings.EMBED_COLOR
    if continuation_suffix is None:
        continuation_suffix = settings.CONTINUATION_SUFFIX

    base_title = f"📅 {snapshot.date}"

    def seal(title, description):
        return MessageChunk(
            title=title,
            url=snapshot.date_url,
            color=color,
            timestamp=timestamp,
            description=description,
        )

    chunks = []
    title = base_title
    description = ""

    for event in snapshot.modifications:
        block = render_modification(event)

        if description and len(description) + len(block) > max_chunk_chars:
            chunks.append(seal(title, description))
            title = f"{base_title} {continuation_suffix}"
            description = block
        else:
            description += block

    if description:
        chunks.append(seal(title, description))

    return chunks
