"""
Ranking Module
Re-ranks backend candidates against the search term

Strategies:
- LEVENSHTEIN / JACCARD / JARO_WINKLER: string similarity baselines
- DISTRIBUTIONAL: corpus-based relatedness from an external REST service
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import httpx
import numpy as np
from loguru import logger

from config.settings import settings
from .errors import RankingError
from .model import Entity, Score, Scores


class RankingStrategy(str, Enum):
    LEVENSHTEIN = "levenshtein"
    JACCARD = "jaccard"
    JARO_WINKLER = "jaro_winkler"
    DISTRIBUTIONAL = "distributional"


@dataclass
class StringRankParams:
    """Parameters of the string similarity rankers"""
    strategy: RankingStrategy = RankingStrategy.LEVENSHTEIN
    threshold: float = 0.0


@dataclass
class DistributionalRankParams:
    """
    Parameters of the distributional ranker.

    url, corpus and language are filled in by the entity searcher from the
    process configuration and the target knowledge base before ranking.
    """
    url: Optional[str] = None
    corpus: Optional[str] = None
    language: Optional[str] = None
    score_function: str = "COSINE"
    model: str = "W2V"
    threshold: float = 0.0
    strategy: RankingStrategy = RankingStrategy.DISTRIBUTIONAL

    def configure(self, url: str, corpus: str, language: str) -> "DistributionalRankParams":
        self.url = url
        self.corpus = corpus
        self.language = language
        return self


RankParams = Union[StringRankParams, DistributionalRankParams]


class ParamsBuilder:
    """Shortcuts for the supported rank parameter variants"""

    @staticmethod
    def levenshtein(threshold: float = 0.0) -> StringRankParams:
        return StringRankParams(RankingStrategy.LEVENSHTEIN, threshold)

    @staticmethod
    def jaccard(threshold: float = 0.0) -> StringRankParams:
        return StringRankParams(RankingStrategy.JACCARD, threshold)

    @staticmethod
    def jaro_winkler(threshold: float = 0.0) -> StringRankParams:
        return StringRankParams(RankingStrategy.JARO_WINKLER, threshold)

    @staticmethod
    def distributional(threshold: float = 0.0, score_function: str = "COSINE") -> DistributionalRankParams:
        return DistributionalRankParams(score_function=score_function, threshold=threshold)


def entry_text(entry: Any) -> str:
    """Textual form of an entry used for similarity scoring"""
    if isinstance(entry, Entity):
        return entry.value
    return str(entry)


def levenshtein_similarity(s1: str, s2: str) -> float:
    """1 - edit distance / length of the longer string (case-insensitive)"""
    s1, s2 = s1.lower(), s2.lower()
    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0

    previous = np.arange(len(s2) + 1)
    for i, c1 in enumerate(s1, start=1):
        current = np.empty_like(previous)
        current[0] = i
        for j, c2 in enumerate(s2, start=1):
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (c1 != c2),
            )
        previous = current

    return 1.0 - float(previous[-1]) / max(len(s1), len(s2))


def jaccard_similarity(s1: str, s2: str) -> float:
    """Intersection over union of lower-cased tokens"""
    tokens1 = set(s1.lower().split())
    tokens2 = set(s2.lower().split())
    union = tokens1 | tokens2
    if not union:
        return 0.0
    return len(tokens1 & tokens2) / len(union)


def jaro_similarity(s1: str, s2: str) -> float:
    if not s1 or not s2:
        return 0.0
    if s1 == s2:
        return 1.0

    len1, len2 = len(s1), len(s2)
    match_distance = max(max(len1, len2) // 2 - 1, 0)

    s1_matches = [False] * len1
    s2_matches = [False] * len2
    matches = 0

    for i in range(len1):
        start = max(0, i - match_distance)
        end = min(i + match_distance + 1, len2)
        for j in range(start, end):
            if s2_matches[j] or s1[i] != s2[j]:
                continue
            s1_matches[i] = True
            s2_matches[j] = True
            matches += 1
            break

    if matches == 0:
        return 0.0

    # Count transpositions
    transpositions = 0
    k = 0
    for i in range(len1):
        if not s1_matches[i]:
            continue
        while not s2_matches[k]:
            k += 1
        if s1[i] != s2[k]:
            transpositions += 1
        k += 1

    return (matches / len1 + matches / len2 + (matches - transpositions / 2) / matches) / 3


def jaro_winkler_similarity(s1: str, s2: str, prefix_weight: float = 0.1) -> float:
    s1, s2 = s1.lower(), s2.lower()
    jaro = jaro_similarity(s1, s2)

    # Common prefix, up to 4 chars
    prefix_len = 0
    for i in range(min(len(s1), len(s2), 4)):
        if s1[i] != s2[i]:
            break
        prefix_len += 1

    return jaro + prefix_len * prefix_weight * (1 - jaro)


SIMILARITY_FUNCTIONS = {
    RankingStrategy.LEVENSHTEIN: levenshtein_similarity,
    RankingStrategy.JACCARD: jaccard_similarity,
    RankingStrategy.JARO_WINKLER: jaro_winkler_similarity,
}


def _rank(scores: Scores, values: List[float], threshold: float) -> Scores:
    """Keep values >= threshold, ordered by value (stable)"""
    values_array = np.array(values, dtype=float)
    order = np.argsort(-values_array, kind="stable")
    return Scores(
        Score(scores[i].entry, float(values_array[i]))
        for i in order
        if values_array[i] >= threshold
    )


class StringRanker:
    """Scores each entry's text against the target with a string similarity"""

    def __init__(self, params: StringRankParams):
        if params.strategy not in SIMILARITY_FUNCTIONS:
            raise RankingError(f"No string similarity for strategy '{params.strategy}'")
        self.params = params
        self.similarity = SIMILARITY_FUNCTIONS[params.strategy]

    def score(self, scores: Scores, target: str) -> Scores:
        values = [self.similarity(entry_text(s.entry), target) for s in scores]
        return _rank(scores, values, self.params.threshold)


class DistributionalRanker:
    """
    Relatedness scores from a distributional semantics REST service

    POST {url}/relatedness with the term pairs; the service answers with the
    same pairs carrying a score.
    """

    def __init__(
        self,
        params: DistributionalRankParams,
        timeout: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        missing = [k for k in ("url", "corpus", "language") if not getattr(params, k)]
        if missing:
            raise RankingError(f"Distributional rank params not configured: {', '.join(missing)}")
        self.params = params
        self.timeout = timeout or settings.DISTRIBUTIONAL_SERVICE_TIMEOUT
        self.transport = transport

    def _build_payload(self, target: str, texts: List[str]) -> Dict[str, Any]:
        return {
            "corpus": self.params.corpus,
            "model": self.params.model,
            "language": self.params.language,
            "scoreFunction": self.params.score_function,
            "pairs": [{"t1": target, "t2": text} for text in texts],
        }

    def _relatedness(self, target: str, texts: List[str]) -> Dict[str, float]:
        url = f"{self.params.url.rstrip('/')}/relatedness"
        payload = self._build_payload(target, texts)

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, json=payload)
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            logger.error(
                f"Distributional service HTTP error: {e.response.status_code} - {e.response.text}"
            )
            raise RankingError(f"Distributional service returned {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            logger.error(f"Distributional service timeout: {e}")
            raise RankingError("Distributional service timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Distributional service unreachable: {e}")
            raise RankingError(f"Distributional service unreachable at {url}") from e
        except ValueError as e:
            raise RankingError("Distributional service returned invalid JSON") from e

        try:
            return {pair["t2"]: float(pair["score"]) for pair in data["pairs"]}
        except (KeyError, TypeError, ValueError) as e:
            raise RankingError(f"Unexpected distributional service response: {data!r}") from e

    def score(self, scores: Scores, target: str) -> Scores:
        texts = [entry_text(s.entry) for s in scores]
        relatedness = self._relatedness(target, list(dict.fromkeys(texts)))
        values = [relatedness.get(text, 0.0) for text in texts]
        logger.debug(f"Distributional relatedness for '{target}': {relatedness}")
        return _rank(scores, values, self.params.threshold)


def create_ranker(rank_params: RankParams):
    """Select the ranker implementation for a rank parameter variant"""
    if rank_params.strategy is RankingStrategy.DISTRIBUTIONAL:
        return DistributionalRanker(rank_params)
    return StringRanker(rank_params)


def apply(scores: Scores, rank_params: RankParams, target: str) -> Scores:
    """
    Re-rank scores against the target term

    Args:
        scores: Candidates to rank (input values are ignored)
        rank_params: Rank parameter variant selecting the strategy
        target: The original search term

    Returns:
        New Scores ordered by relevance, filtered by the params threshold

    Raises:
        RankingError: If the ranking strategy fails
    """
    if not scores:
        return Scores()

    ranker = create_ranker(rank_params)
    ranked = ranker.score(Scores(scores), target or "")
    logger.info(f"Ranked {len(scores)} candidates with {rank_params.strategy.value}: {len(ranked)} kept")
    return ranked
