"""String normalization used by track matching.

Strips the noise that makes otherwise identical titles compare unequal:
parentheticals, bracketed tags, featuring clauses and trailing track numbers.
All functions are pure; the memoized ones are bounded and cleared between
comparison batches.
"""

from functools import lru_cache
import re
import unicodedata

from attrs import define

_PARENTHESES = re.compile(r"\(.*?\)", re.DOTALL)
_BRACKETS = re.compile(r"\[.*?\]", re.DOTALL)
_FEATURING_TAIL = re.compile(r"\bfeat\b\.?.*$", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")
_TRAILING_NUMBERS = re.compile(r"(?:\s+\d+)+\s*$")
_TRAILING_NUMBER = re.compile(r"\s+\d+\s*$")
_FEATURING_SPLIT = re.compile(
    r"(.*?)(?:\s*[\(\[]feat\.?\s*|\s+feat\.?\s+)(.*?)(?:[\)\]]|\s*$)",
    re.IGNORECASE | re.DOTALL,
)
_PARENTHETICAL_FEAT = re.compile(r"\(.*?feat.*?\)", re.DOTALL)
_CJK = re.compile(
    r"["
    r"\u3040-\u30ff"  # Hiragana, Katakana
    r"\u3400-\u4dbf"  # CJK Extension A
    r"\u4e00-\u9fff"  # CJK Unified Ideographs
    r"\uf900-\ufaff"  # CJK Compatibility Ideographs
    r"\ufe30-\ufe4f"  # CJK Compatibility Forms
    r"\uff66-\uff9f"  # Half-width Katakana
    r"]"
)
# U+FFFD and its UTF-8-read-as-Latin-1 mojibake
_REPLACEMENT_CHARS = re.compile(r"\ufffd|ï¿½")

NORMALIZE_CACHE_SIZE = 4096


@define(frozen=True, slots=True)
class FeaturingSplit:
    """A title split into its main part and featured artist."""

    main_title: str
    feat_artist: str = ""
    has_feat: bool = False


@lru_cache(maxsize=NORMALIZE_CACHE_SIZE)
def normalize(text: str | None) -> str:
    """Canonical comparison form of a title, artist or album name.

    Examples:
        >>> normalize("Song Title (Remastered 2011) [Live]")
        'song title'
        >>> normalize("Track feat. Someone")
        'track'
        >>> normalize("On & On 2")
        'on & on'
    """
    if not text:
        return ""
    result = unicodedata.normalize("NFC", text.lower())
    result = _PARENTHESES.sub("", result)
    result = _BRACKETS.sub("", result)
    result = _FEATURING_TAIL.sub("", result)
    result = _WHITESPACE.sub(" ", result)
    result = _TRAILING_NUMBERS.sub("", result)
    return result.strip()


def split_featuring(text: str | None) -> FeaturingSplit:
    """Separate a ``(feat. X)`` / ``[feat. X]`` / ``feat. X`` clause from a title."""
    if not text:
        return FeaturingSplit(main_title="")
    lowered = unicodedata.normalize("NFC", text).lower()
    match = _FEATURING_SPLIT.match(lowered)
    if match:
        return FeaturingSplit(
            main_title=match.group(1).strip(),
            feat_artist=match.group(2).strip(),
            has_feat=True,
        )
    return FeaturingSplit(main_title=lowered.strip())


def has_featuring_marker(text: str) -> bool:
    lowered = text.lower()
    return (
        "feat." in lowered
        or "ft." in lowered
        or _PARENTHETICAL_FEAT.search(text) is not None
    )


def has_cjk(text: str | None) -> bool:
    """True if the text contains any Chinese/Japanese script code point."""
    return bool(text) and _CJK.search(text) is not None


def has_trailing_number(text: str) -> bool:
    return _TRAILING_NUMBER.search(text) is not None


def strip_trailing_number(text: str) -> str:
    """Drop a trailing bare number token: ``"Song Title 2"`` -> ``"Song Title"``."""
    return _TRAILING_NUMBER.sub("", text).strip()


def clean_query_text(text: str | None) -> str:
    """Prepare user-supplied metadata for a catalog query."""
    if not text:
        return ""
    return _REPLACEMENT_CHARS.sub("", unicodedata.normalize("NFC", text)).strip()


def clear_normalization_cache() -> None:
    normalize.cache_clear()
