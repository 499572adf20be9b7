"""
Google Drive share-link resolution.

Turns a user-supplied share link into a Drive file id and builds the
canonical direct-download URL for that id.

Recognised link shapes:
  https://drive.google.com/file/d/<id>/view?usp=sharing   (path form, wins)
  https://drive.google.com/open?id=<id>                   (query form)
  https://drive.google.com/uc?export=download&id=<id>     (query form)
"""

import re
from typing import Optional
from urllib.parse import parse_qs, quote, urlparse

DRIVE_DOWNLOAD_BASE = "https://drive.google.com/uc"

_FILE_PATH_RE = re.compile(r"/file/d/([^/]+)")


def extract_drive_file_id(url: Optional[str]) -> Optional[str]:
    """
    Extract the Drive file id from a share link.

    The ``/file/d/<id>`` path segment takes priority over an ``id`` query
    parameter. Strings that are not absolute URLs are treated the same as
    links without an id.

    Returns:
        The file id, or None if none could be extracted.
    """
    if not url:
        return None

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    if not parsed.scheme or not parsed.netloc:
        return None

    m = _FILE_PATH_RE.search(parsed.path)
    if m:
        return m.group(1)

    ids = parse_qs(parsed.query).get("id")
    if ids:
        return ids[0]
    return None


def build_drive_download_url(file_id: str, confirm_token: Optional[str] = None) -> str:
    """Return the direct-download URL for a file id, optionally carrying a confirm token."""
    url = f"{DRIVE_DOWNLOAD_BASE}?export=download&id={quote(file_id, safe='')}"
    if confirm_token:
        url += f"&confirm={quote(confirm_token, safe='')}"
    return url
