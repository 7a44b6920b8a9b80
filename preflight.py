# preflight.py
import re
from typing import List

from pydantic import BaseModel

SUMMARY_MAX = 140
FRAME_FALLBACK_MAX = 80
MAX_FRAMES = 3

# Naive denylist; any case-insensitive substring hit blocks approval.
SENSITIVE_TERMS = ("terror", "bomb", "assassin", "suicide", "drugs")

_SENTENCE_END = re.compile(r"[.?!]\s")


class Advisory(BaseModel):
    summary: str
    frames: List[str]
    warnings: List[str]
    suggested_prompt: str
    estimated_time_seconds: int
    approved: bool


def _frames(prompt: str) -> List[str]:
    sentences = [s.strip() for s in _SENTENCE_END.split(prompt) if s.strip()]
    if len(sentences) >= MAX_FRAMES:
        return sentences[:MAX_FRAMES]
    parts = [s.strip() for s in prompt.split(",") if s.strip()]
    if parts:
        return parts[:MAX_FRAMES]
    return [prompt[:FRAME_FALLBACK_MAX]] if prompt else []


def _estimate_seconds(resolution: str, quality: str) -> int:
    if quality == "fast":
        return 5 if "720" in resolution else 20
    return 80 if "1080" in resolution else 40


def advise(prompt: str, aspect_ratio: str = "9:16", resolution: str = "720p", quality: str = "fast") -> Advisory:
    """
    Heuristic pre-check of a prompt before spending a provider call on it.

    Pure and total: an empty prompt yields a degenerate advisory rather
    than an error. `aspect_ratio` is accepted for parity with the generate
    request but does not influence the estimate.
    """
    p = (prompt or "").strip()
    resolution = resolution or ""
    summary = p if len(p) <= SUMMARY_MAX else p[:SUMMARY_MAX] + "..."

    lowered = p.lower()
    warnings = [f'Sensitive content detected: "{term}"' for term in SENSITIVE_TERMS if term in lowered]

    return Advisory(
        summary=summary,
        frames=_frames(p),
        warnings=warnings,
        suggested_prompt=p,
        estimated_time_seconds=_estimate_seconds(resolution, quality),
        approved=not warnings,
    )
