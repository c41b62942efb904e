"""Utility functions for URL, date and duration formatting."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional
from urllib.parse import parse_qs, urlparse

_YOUTUBE_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_youtube_id(url: str) -> str:
    """Extract the 11 character video id from a YouTube URL.

    Handles ``watch?v=``, ``youtu.be/``, ``/shorts/``, ``/live/`` and ``/embed/``
    forms. Returns an empty string if the URL is not a recognisable video link.
    """
    if not url:
        return ""

    parsed = urlparse(url.strip())
    host = re.sub(r"^(www\.|m\.|music\.)", "", parsed.netloc.lower())

    candidate = ""
    if host == "youtu.be":
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif host in ("youtube.com", "youtube-nocookie.com"):
        if parsed.path == "/watch":
            candidate = parse_qs(parsed.query).get("v", [""])[0]
        else:
            parts = [part for part in parsed.path.split("/") if part]
            if len(parts) >= 2 and parts[0] in ("shorts", "live", "embed", "v"):
                candidate = parts[1]

    return candidate if _YOUTUBE_ID.match(candidate) else ""


def canonical_video_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def format_duration(seconds: Optional[int]) -> str:
    """Short duration label, e.g. ``1h 5m`` or ``42m``. Empty for unknown."""
    if not seconds:
        return ""
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_long_date(value: Optional[date]) -> str:
    """Format a date like ``Monday, March 3, 2025``."""
    if value is None:
        return ""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"
