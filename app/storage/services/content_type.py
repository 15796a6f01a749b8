"""
Audio content sniffing.

Uploads are classified from their leading bytes, never from the
client-declared type. Anything that does not sniff as audio is rejected.
"""

from __future__ import annotations

import filetype

# Containers that filetype reports as video/* but routinely carry audio only
_AUDIO_CONTAINERS = {
    "video/mp4": "audio/mp4",
    "video/webm": "audio/webm",
}


def sniff_audio_type(content: bytes) -> str | None:
    """
    Return the audio MIME type detected from ``content``, or None.

    Args:
        content: The full upload or at least its first few hundred bytes.
    """
    if not content:
        return None

    kind = filetype.guess(content)
    if kind is None:
        return None

    mime = kind.mime
    if mime.startswith("audio/"):
        return mime
    return _AUDIO_CONTAINERS.get(mime)
