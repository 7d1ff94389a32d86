"""Media metadata: decoded duration of a staged audio file."""

from __future__ import annotations

import logging

import mutagen

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """The file is not a readable audio container."""


def decode_duration(path: str) -> float:
    """
    Return the playing time of *path* in seconds.

    Blocking; run it in a worker thread from async code.
    """
    try:
        audio = mutagen.File(path)
    except mutagen.MutagenError as exc:
        raise DecodeError(f"Cannot decode {path}: {exc}") from exc

    if audio is None or audio.info is None:
        raise DecodeError(f"Unrecognised audio container: {path}")

    length = getattr(audio.info, "length", None)
    if length is None or length < 0:
        raise DecodeError(f"No duration in {path}")
    return float(length)
