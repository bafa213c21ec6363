# englishpath/answers.py
import re

# . , ! ? ; : " '
_PUNCT_RE = re.compile(r"[.,!?;:\"']")


def normalize_answer(raw) -> str:
    """
    Lowercase, drop sentence punctuation and trim the ends.

    Interior whitespace is left alone: "a  b" and "a b" stay different.
    """
    if raw is None:
        return ""
    return _PUNCT_RE.sub("", str(raw).lower()).strip()


def is_match(reference, candidate) -> bool:
    return normalize_answer(reference) == normalize_answer(candidate)
