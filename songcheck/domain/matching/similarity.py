"""Script-aware string similarity for track matching.

Latin-script strings are compared by word overlap blended with positional
character agreement; strings containing CJK characters are compared as
unordered character multisets, since whitespace tokenization carries no
meaning there.
"""

from collections import Counter
from functools import lru_cache

from rapidfuzz.distance import Hamming

from .normalization import has_cjk, normalize, split_featuring

SIMILARITY_CACHE_SIZE = 8192

# Multiplied by shorter/longer length ratio
CONTAINMENT_WEIGHT = 0.9
WORD_WEIGHT = 0.7
CHAR_WEIGHT = 0.3
MIN_WORD_LENGTH = 2

FEATURING_TITLE_WEIGHT = 0.8
FEATURING_ARTIST_WEIGHT = 0.2


def similarity(a: str | None, b: str | None) -> float:
    """Similarity of two strings in ``[0, 1]``, symmetric in its arguments."""
    if not a or not b:
        return 0.0
    # Memoize on the ordered pair so both argument orders share one result
    return _similarity(a, b) if a <= b else _similarity(b, a)


@lru_cache(maxsize=SIMILARITY_CACHE_SIZE)
def _similarity(a: str, b: str) -> float:
    str_a, str_b = normalize(a), normalize(b)

    if str_a == str_b:
        return 1.0

    if str_a in str_b or str_b in str_a:
        shorter, longer = sorted((len(str_a), len(str_b)))
        return CONTAINMENT_WEIGHT * (shorter / longer)

    if has_cjk(str_a) or has_cjk(str_b):
        return _character_overlap(str_a, str_b)

    return _word_and_char_similarity(str_a, str_b)


def _character_overlap(str_a: str, str_b: str) -> float:
    """Matched characters over the longer length, each character used once."""
    matches = sum((Counter(str_a) & Counter(str_b)).values())
    return matches / max(len(str_a), len(str_b))


def _word_and_char_similarity(str_a: str, str_b: str) -> float:
    words_a, words_b = str_a.split(), str_b.split()
    candidates = [word for word in words_b if len(word) >= MIN_WORD_LENGTH]

    word_matches = 0
    for word_a in words_a:
        if len(word_a) < MIN_WORD_LENGTH:
            continue
        if any(word_b in word_a or word_a in word_b for word_b in candidates):
            word_matches += 1

    word_sim = word_matches / max(len(words_a), len(words_b))
    # Positional equality over the shared prefix, divided by the longer length
    char_sim = Hamming.normalized_similarity(str_a, str_b, pad=True)

    return word_sim * WORD_WEIGHT + char_sim * CHAR_WEIGHT


def compare_with_featuring(local_title: str, remote_title: str) -> float:
    """Title similarity that weighs featured artists separately.

    When both titles carry a featuring clause the main titles and the
    featured artists are compared independently.
    """
    local = split_featuring(local_title)
    remote = split_featuring(remote_title)

    if local.has_feat and remote.has_feat:
        title_sim = similarity(local.main_title, remote.main_title)
        feat_sim = similarity(local.feat_artist, remote.feat_artist)
        return title_sim * FEATURING_TITLE_WEIGHT + feat_sim * FEATURING_ARTIST_WEIGHT

    if local_title.lower() == remote_title.lower():
        return 1.0

    return similarity(local_title, remote_title)


def clear_similarity_cache() -> None:
    _similarity.cache_clear()
