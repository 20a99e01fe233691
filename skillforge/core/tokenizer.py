"""Tokenization and corpus relevance weights for description matching."""

from __future__ import annotations

import math
import re
from collections import Counter
from collections.abc import Iterable, Sequence

from skillforge.contracts.skill import Skill

# Common function words that never discriminate between skills.
STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
        "her", "was", "one", "our", "out", "has", "have", "from", "they", "been",
        "said", "each", "she", "which", "their", "will", "way", "about", "use",
        "when", "what", "your", "how", "this", "that", "with", "via", "using",
        "into", "also", "than", "them", "then", "its", "over", "such", "more",
    }
)
MIN_TOKEN_LENGTH = 3
# Below this many skills, corpus statistics are too thin to weight tokens.
IDF_MIN_SKILLS = 5

_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def tokenize(
    text: str,
    *,
    min_length: int = MIN_TOKEN_LENGTH,
    stop_words: Iterable[str] = STOP_WORDS,
) -> list[str]:
    """Lowercase and split ``text``, keeping order and duplicates."""

    return [
        token
        for token in _SPLIT_RE.split(text.lower())
        if len(token) >= min_length and token not in stop_words
    ]


def build_weights(skills: Sequence[Skill]) -> dict[str, float]:
    """Inverse document frequency of every description token.

    ``ln(N / df)`` where ``N`` is the skill count and ``df`` the number of
    descriptions containing the token at least once.
    """

    doc_count = len(skills)
    doc_freq: Counter[str] = Counter()
    for skill in skills:
        doc_freq.update(set(tokenize(skill.description)))
    return {token: math.log(doc_count / freq) for token, freq in doc_freq.items()}
