"""Plain-text curation drafts for the urgent and evergreen issues.

Drafts are a worksheet for the editor, not the email that goes out. Every
field that has not been curated yet is rendered as a ``{{...}}`` placeholder
so the draft always has the full structure and can be edited in place.
Drafts are derived from the current items on every call and never cached.
"""

from datetime import date
from typing import List, Optional, Sequence

from curation_desk.models.content import ItemFields, NewsletterIssue, NewsletterItem

PUBLICATION_NAME = "Executive Algorithm"
DIVIDER = "\n\n— — —\n\n"
SIGNAL_SLOTS = 3

PLACEHOLDERS = {
    "podcast_name": "{{PODCAST_NAME}}",
    "guest_name": "{{GUEST_NAME}}",
    "actor": "{{ONE_SENTENCE_LEVERAGE}}",
    "actor_long": "{{ONE_SENTENCE_LEVERAGE_WHO_THEY_ARE_AND_WHY_THEY_MATTER}}",
    "topics": "{{ONE_SENTENCE_2-3_DOMAINS_PLUS_THE_DECISION/TRADEOFF}}",
    "topics_evergreen": "{{ONE_SENTENCE_2-3_DOMAINS_PLUS_THE_SYSTEM_THEYRE_MODELING}}",
    "why_now": "{{ONE_SENTENCE_WHAT_DECISION_OR_RISK_CHANGES_IF_YOU_WAIT}}",
    "why_compounds": "{{ONE_SENTENCE_HOW_THIS_CHANGES_DECISIONS_OVER_TIME}}",
    "listen_if": "{{CONDITION_1}}",
    "skip_if": "{{CONDITION_2}}",
    "horizon": "{{WEEKS_OR_MONTHS}}",
    "framework": "{{ONE_SENTENCE_CORE_MODEL_OR_ASSUMPTION}}",
    "date": "{{DATE}}",
}

SIGNAL_PLACEHOLDERS = (
    "{{NUGGET_1_FRAMEWORK_OR_TRADEOFF_OR_PREDICTION}}",
    "{{NUGGET_2_NON_CONSENSUS_OR_COMPETITIVE_POSITIONING}}",
    "{{NUGGET_3_CONSTRAINT_OR_TIMELINE}}",
)

NUGGET_PLACEHOLDERS = (
    "{{NUGGET_1_REUSABLE_RULE_OR_HEURISTIC}}",
    "{{NUGGET_2_INCENTIVE_OR_ORG_DESIGN_INSIGHT}}",
    "{{NUGGET_3_SECOND_ORDER_EFFECT_OR_FAILURE_MODE}}",
)

EMPTY_ISSUE_PLACEHOLDERS = {
    "urgent": "{{URGENT_ITEM_1}}",
    "evergreen": "{{EVERGREEN_ITEM_1}}",
}


def value_or_placeholder(value: Optional[str], placeholder: str) -> str:
    """Return ``value`` trimmed, or ``placeholder`` if it is blank or missing."""
    trimmed = value.strip() if isinstance(value, str) else ""
    return trimmed or placeholder


def slot_values(values: Optional[Sequence[str]], placeholders: Sequence[str]) -> List[str]:
    """Resolve a list field into exactly one entry per placeholder slot."""
    values = values or []
    return [
        value_or_placeholder(values[index] if index < len(values) else None, placeholder)
        for index, placeholder in enumerate(placeholders)
    ]


def format_issue_date(issue_date: Optional[date]) -> str:
    if not issue_date:
        return PLACEHOLDERS["date"]
    return issue_date.isoformat()


def _podcast_name(item: NewsletterItem) -> str:
    for candidate in (item.fields.podcast_name, item.video.channel_name):
        if candidate and candidate.strip():
            return candidate.strip()
    return PLACEHOLDERS["podcast_name"]


def _block_head(item: NewsletterItem, index: int, marker: str) -> List[str]:
    fields = item.fields
    guest_name = value_or_placeholder(fields.guest_name, PLACEHOLDERS["guest_name"])
    # The lead story gets the longer framing prompt.
    actor_placeholder = PLACEHOLDERS["actor_long" if index == 0 else "actor"]
    return [
        marker if index == 0 else "",
        f"{_podcast_name(item)} — {guest_name}".strip(),
        item.video.video_url,
        "",
        "Actor:",
        value_or_placeholder(fields.actor, actor_placeholder),
    ]


def _listen_or_skip(fields: ItemFields) -> List[str]:
    listen_if = value_or_placeholder(fields.listen_if, PLACEHOLDERS["listen_if"])
    skip_if = value_or_placeholder(fields.skip_if, PLACEHOLDERS["skip_if"])
    return ["Listen or skip:", f"Listen if {listen_if}. Skip if {skip_if}."]


def _bullets(values: List[str]) -> List[str]:
    return [f"• {value}" for value in values]


def _compact(lines: List[str]) -> str:
    return "\n".join(line for line in lines if line != "")


def build_urgent_block(item: NewsletterItem, index: int) -> str:
    fields = item.fields
    lines = _block_head(item, index, "★ Must Watch (Urgent)")
    lines += [
        "",
        "Topics:",
        value_or_placeholder(fields.topics, PLACEHOLDERS["topics"]),
        "",
        "Signals:",
        *_bullets(slot_values(fields.signals, SIGNAL_PLACEHOLDERS)),
        "",
        "Why it matters now:",
        value_or_placeholder(fields.why_now, PLACEHOLDERS["why_now"]),
        "",
        *_listen_or_skip(fields),
        "",
        "Relevance horizon:",
        value_or_placeholder(fields.relevance_horizon, PLACEHOLDERS["horizon"]),
    ]
    return _compact(lines)


def build_evergreen_block(item: NewsletterItem, index: int) -> str:
    fields = item.fields
    lines = _block_head(item, index, "★ Must Keep (Evergreen)")
    lines += [
        "",
        "Topics:",
        value_or_placeholder(fields.topics, PLACEHOLDERS["topics_evergreen"]),
        "",
        "Framework / Assumption:",
        value_or_placeholder(fields.framework, PLACEHOLDERS["framework"]),
        "",
        "Why it compounds:",
        value_or_placeholder(fields.why_compounds, PLACEHOLDERS["why_compounds"]),
        "",
        "Nuggets:",
        *_bullets(slot_values(fields.nuggets, NUGGET_PLACEHOLDERS)),
        "",
        *_listen_or_skip(fields),
        "",
        "Relevance horizon:",
        "Multi-year",
    ]
    return _compact(lines)


def _assemble(section: str, meta_label: str, body: str, issue_date: Optional[date]) -> str:
    header = "\n".join(
        [PUBLICATION_NAME, f"{section} — {format_issue_date(issue_date)}", ""]
    )
    footer = "\n".join(
        [
            "",
            meta_label,
            "Signals surfaced: {{SIGNAL_COUNT}} / Episodes reviewed: ~{{EPISODE_REVIEWED_COUNT}}",
            "",
            "Reply if something here feels off or missing.",
            "Unsubscribe",
        ]
    )
    return f"{header}{body}{footer}"


def build_urgent_draft(items: Sequence[NewsletterItem], issue_date: Optional[date]) -> str:
    blocks = [build_urgent_block(item, index) for index, item in enumerate(items)]
    body = DIVIDER.join(blocks) if blocks else EMPTY_ISSUE_PLACEHOLDERS["urgent"]
    return _assemble(
        "Urgent Signals", "Meta (optional, quiet credibility line):", body, issue_date
    )


def build_evergreen_draft(
    items: Sequence[NewsletterItem], issue_date: Optional[date]
) -> str:
    blocks = [build_evergreen_block(item, index) for index, item in enumerate(items)]
    body = DIVIDER.join(blocks) if blocks else EMPTY_ISSUE_PLACEHOLDERS["evergreen"]
    return _assemble("Evergreen Signals", "Meta (optional):", body, issue_date)


def build_draft(issue: NewsletterIssue, items: Sequence[NewsletterItem]) -> str:
    """Draft for ``issue`` with ``items`` taken in the order given."""
    if issue.type == "urgent":
        return build_urgent_draft(items, issue.issue_date)
    return build_evergreen_draft(items, issue.issue_date)
