"""
Proposal post-processing - deterministic clean-up of model-written proposals

finalize_proposal() guarantees the presentation contract regardless of how
well the model followed instructions:

    1. Leaked analysis sections ("## Requirement Matrix", "## Clarifying
       Questions") are removed with everything after them.
    2. The text opens with a greeting (Hi / Hello / Dear, case-insensitive);
       otherwise DEFAULT_GREETING is prepended.
    3. The last line is the one and only sign-off, and its last word is one
       of Best / Regards / Sincerely / Thanks / Cheers. A closing sign-off
       the model wrote is kept when it already ends that way ("Kind
       regards,") and replaced with DEFAULT_SIGN_OFF otherwise ("Thanks
       again!"). Sign-off lines anywhere else, a name after the sign-off and
       "[Your Name]" placeholders are stripped. A short line after the
       sign-off that is not a name stays in the body.
"""

import re
from typing import List

GREETINGS = ("hi", "hello", "dear")
SIGN_OFFS = ("best", "regards", "sincerely", "thanks", "cheers")

DEFAULT_GREETING = "Hi there,"
DEFAULT_SIGN_OFF = "Best regards"

GREETING_RE = re.compile(r"^\W*(?:%s)\b" % "|".join(GREETINGS), re.IGNORECASE)
SIGN_OFF_LINE_RE = re.compile(
    r"^\W*(?:(?:warm(?:est)?|kind|best|with)\s+)?"
    r"(?:%s)"
    r"(?:\s+(?:regards|wishes|again|so much|yours))?"
    r"\s*[,.!]?\W*$" % "|".join(SIGN_OFFS),
    re.IGNORECASE,
)
PLACEHOLDER_RE = re.compile(r"^\W*\[(?:your\s+)?name\]\W*$", re.IGNORECASE)
LEAKED_SECTION_RE = re.compile(
    r"^#+\s*(?:requirements?\s+matrix|clarifying\s+questions)\b",
    re.IGNORECASE | re.MULTILINE,
)
NAME_MAX_WORDS = 4
NAME_PARTICLES = ("de", "van", "von", "da", "del", "le", "la", "bin")


def strip_leaked_sections(text: str) -> str:
    match = LEAKED_SECTION_RE.search(text)
    if match:
        text = text[:match.start()]
    return text.strip()


def has_greeting(text: str) -> bool:
    return bool(GREETING_RE.match(text.lstrip()))


def is_sign_off(line: str) -> bool:
    return bool(SIGN_OFF_LINE_RE.match(line.strip()))


def ends_with_sign_off_token(line: str) -> bool:
    words = line.strip().rstrip(",.!").split()
    return bool(words) and words[-1].lower() in SIGN_OFFS


def _is_name_word(word: str) -> bool:
    if word.lower() in NAME_PARTICLES:
        return True
    return word[0].isupper() and all(c.isalpha() or c in ".-" for c in word)


def _looks_like_name(line: str) -> bool:
    """Capitalised name words such as Jane Doe or J. Smith, never a sentence."""
    words = line.strip().rstrip(",").split()
    return 0 < len(words) <= NAME_MAX_WORDS and all(_is_name_word(w) for w in words)


def _trim_trailing_blank(lines: List[str]) -> List[str]:
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def enforce_sign_off(text: str) -> str:
    lines = _trim_trailing_blank([l for l in text.split("\n") if not PLACEHOLDER_RE.match(l)])

    # "Best regards,\nJane" closes with the sign-off, not the name
    if len(lines) >= 2 and is_sign_off(lines[-2]) and not is_sign_off(lines[-1]) and _looks_like_name(lines[-1]):
        lines.pop()

    closing = DEFAULT_SIGN_OFF
    if lines and is_sign_off(lines[-1]):
        kept = lines.pop().strip()
        if ends_with_sign_off_token(kept):
            closing = kept
    body = _trim_trailing_blank([l for l in lines if not is_sign_off(l)])
    if not body:
        return closing
    return "\n".join(body) + "\n\n" + closing


def finalize_proposal(text: str) -> str:
    text = strip_leaked_sections(text or "")
    if not has_greeting(text):
        text = f"{DEFAULT_GREETING}\n\n{text}" if text else DEFAULT_GREETING
    return enforce_sign_off(text)
