"""HTML and plain-text email rendering for a newsletter issue.

This is what subscribers receive. Unlike the curation draft it only shows
fields that have actually been filled in.
"""

from html import escape
from typing import List, Sequence

from curation_desk.core.utils import format_duration, format_long_date
from curation_desk.models.content import NewsletterIssue, NewsletterItem

BRAND = "The Conviction Index"
TYPE_LABELS = {"urgent": "Urgent Signals", "evergreen": "Evergreen Signals"}
ACCENT_COLORS = {"urgent": "#3b82f6", "evergreen": "#38bdf8"}

_LABEL_STYLE = (
    "margin: 0 0 4px; font-size: 10px; font-weight: 600; color: #64748b; "
    "text-transform: uppercase; letter-spacing: 0.08em;"
)
_TEXT_STYLE = "margin: 0; font-size: 13px; color: #e2e8f0; line-height: 1.6;"
_LIST_STYLE = (
    "margin: 0; padding-left: 16px; font-size: 13px; color: #e2e8f0; line-height: 1.6;"
)


def _ordered(items: Sequence[NewsletterItem]) -> List[NewsletterItem]:
    return sorted(items, key=lambda item: item.position)


def _title_line(item: NewsletterItem) -> str:
    podcast = item.fields.podcast_name or item.video.channel_name or "Podcast"
    return f"{podcast} — {item.fields.guest_name or 'Guest'}"


def _html_section(label: str, text: str) -> str:
    return (
        '<div style="margin-top: 12px;">'
        f'<p style="{_LABEL_STYLE}">{escape(label)}</p>'
        f'<p style="{_TEXT_STYLE}">{escape(text)}</p>'
        "</div>"
    )


def _html_list(label: str, entries: Sequence[str]) -> str:
    rows = "".join(
        f'<li style="margin-bottom: 4px;">{escape(entry)}</li>' for entry in entries
    )
    return (
        '<div style="margin-top: 12px;">'
        f'<p style="{_LABEL_STYLE}">{escape(label)}</p>'
        f'<ul style="{_LIST_STYLE}">{rows}</ul>'
        "</div>"
    )


def _render_item_html(item: NewsletterItem, is_urgent: bool) -> str:
    fields = item.fields
    video = item.video
    accent = ACCENT_COLORS["urgent" if is_urgent else "evergreen"]

    if video.thumbnail_url:
        thumbnail = (
            f'<img src="{escape(video.thumbnail_url)}" alt="" width="110" height="62" '
            'style="border-radius: 10px; display: block;">'
        )
    else:
        thumbnail = (
            '<div style="width: 110px; height: 62px; background: #0b1220; '
            'border-radius: 10px;"></div>'
        )

    meta = escape(video.channel_name or "")
    duration = format_duration(video.duration_seconds)
    if duration:
        meta = f"{meta} · {duration}"

    sections: List[str] = []
    if fields.actor:
        sections.append(_html_section("Actor", fields.actor))
    if fields.topics:
        sections.append(_html_section("Topics", fields.topics))
    if is_urgent and fields.signals:
        sections.append(_html_list("Signals", fields.signals))
    if not is_urgent and fields.framework:
        sections.append(_html_section("Framework", fields.framework))
    if not is_urgent and fields.why_compounds:
        sections.append(_html_section("Why it compounds", fields.why_compounds))
    if not is_urgent and fields.nuggets:
        sections.append(_html_list("Nuggets", fields.nuggets))
    if is_urgent and fields.why_now:
        sections.append(_html_section("Why it matters now", fields.why_now))
    if fields.listen_if or fields.skip_if:
        parts = []
        if fields.listen_if:
            parts.append(f"Listen if {fields.listen_if}.")
        if fields.skip_if:
            parts.append(f"Skip if {fields.skip_if}.")
        sections.append(_html_section("Listen or Skip", " ".join(parts)))

    relevance = (fields.relevance_horizon or "Time-sensitive") if is_urgent else "Multi-year"
    url = escape(video.video_url)

    return f"""
    <tr>
      <td style="padding: 12px 0;">
        <table width="100%" cellpadding="0" cellspacing="0" border="0" style="background: #0f172a; border: 1px solid #1f2a44; border-radius: 16px;">
          <tr>
            <td style="padding: 18px;">
              <table width="100%" cellpadding="0" cellspacing="0" border="0">
                <tr>
                  <td width="110" valign="top" style="padding-right: 16px;">{thumbnail}</td>
                  <td valign="top">
                    <a href="{url}" style="color: #e2e8f0; text-decoration: none; font-size: 16px; font-weight: 600; line-height: 1.35;">{escape(_title_line(item))}</a>
                    <p style="margin: 6px 0 0; font-size: 12px; color: #94a3b8;">{meta}</p>
                  </td>
                </tr>
              </table>
              {"".join(sections)}
              <p style="margin: 12px 0 0; font-size: 11px; color: #94a3b8;">
                <strong style="color: {accent};">Relevance:</strong> {escape(relevance)}
              </p>
              <a href="{url}" style="display: inline-block; margin-top: 14px; font-size: 12px; font-weight: 600; color: {accent}; text-decoration: none;">Open episode &rarr;</a>
            </td>
          </tr>
        </table>
      </td>
    </tr>"""


def render_newsletter_html(
    issue: NewsletterIssue, items: Sequence[NewsletterItem]
) -> str:
    """Render the subscriber-facing HTML email."""
    is_urgent = issue.type == "urgent"
    type_label = TYPE_LABELS[issue.type]
    accent = ACCENT_COLORS[issue.type]

    items_html = "".join(_render_item_html(item, is_urgent) for item in _ordered(items))
    if not items_html:
        items_html = (
            '<tr><td style="padding: 40px 0; text-align: center; color: #94a3b8;">'
            "No items in this issue yet.</td></tr>"
        )

    intro = ""
    if issue.preview_text:
        intro = (
            '<tr><td style="padding: 20px 36px 0;">'
            '<p style="margin: 0; font-size: 14px; color: #cbd5f5; line-height: 1.7;">'
            f"{escape(issue.preview_text)}</p></td></tr>"
        )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta http-equiv="X-UA-Compatible" content="IE=edge">
  <title>{escape(issue.subject or type_label)}</title>
</head>
<body style="margin: 0; padding: 0; background-color: #05070a; font-family: 'Sora', 'Space Grotesk', 'Helvetica Neue', Arial, sans-serif;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0" border="0" style="background-color: #05070a;">
    <tr>
      <td align="center" style="padding: 36px 18px;">
        <table role="presentation" width="600" cellpadding="0" cellspacing="0" border="0" style="background-color: #0b1119; border-radius: 20px; border: 1px solid #1f2a44;">
          <tr>
            <td style="padding: 28px 36px 22px; border-bottom: 1px solid #1f2a44;">
              <p style="margin: 0; font-size: 12px; font-weight: 700; color: #94a3b8; letter-spacing: 0.28em; text-transform: uppercase;">{BRAND}</p>
              <p style="margin: 12px 0 0; font-size: 22px; font-weight: 600; color: #f8fafc; letter-spacing: -0.02em;">{type_label}</p>
              <p style="margin: 8px 0 0; font-size: 12px; color: {accent}; font-weight: 600;">{format_long_date(issue.issue_date)}</p>
            </td>
          </tr>
          {intro}
          <tr>
            <td style="padding: 12px 36px 6px;">
              <table width="100%" cellpadding="0" cellspacing="0" border="0">{items_html}
              </table>
            </td>
          </tr>
          <tr>
            <td style="padding: 26px 36px; border-top: 1px solid #1f2a44;">
              <p style="margin: 0 0 12px; font-size: 12px; color: #94a3b8; line-height: 1.6;">Reply if something here feels off or missing.</p>
              <p style="margin: 0; font-size: 11px; color: #64748b;">
                <a href="*|UNSUB|*" style="color: #64748b;">Unsubscribe</a> ·
                <a href="*|UPDATE_PROFILE|*" style="color: #64748b;">Update preferences</a>
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def render_newsletter_text(
    issue: NewsletterIssue, items: Sequence[NewsletterItem]
) -> str:
    """Render the plain-text alternative of the email."""
    is_urgent = issue.type == "urgent"
    lines = [
        BRAND,
        f"{TYPE_LABELS[issue.type]} — {format_long_date(issue.issue_date)}",
        "",
    ]
    if issue.preview_text:
        lines += [issue.preview_text, ""]

    for index, item in enumerate(_ordered(items)):
        fields = item.fields
        if index == 0:
            lines.append("★ Must Watch (Urgent)" if is_urgent else "★ Must Keep (Evergreen)")

        lines += ["", _title_line(item), item.video.video_url, ""]

        if fields.actor:
            lines += ["Actor:", fields.actor, ""]
        if fields.topics:
            lines += ["Topics:", fields.topics, ""]
        if is_urgent and fields.signals:
            lines += ["Signals:", *(f"• {signal}" for signal in fields.signals), ""]
        if not is_urgent and fields.nuggets:
            lines += ["Nuggets:", *(f"• {nugget}" for nugget in fields.nuggets), ""]
        if fields.listen_if or fields.skip_if:
            lines += [
                "Listen or skip:",
                f"Listen if {fields.listen_if or '...'}. Skip if {fields.skip_if or '...'}.",
                "",
            ]
        lines.append("— — —")

    lines += ["", "Reply if something here feels off or missing.", "", "Unsubscribe: *|UNSUB|*"]
    return "\n".join(lines)
