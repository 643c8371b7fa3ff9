"""Keyword clustering.

Single-pass greedy clustering of keyword strings by edit-distance
similarity. Deterministic: the same input list always yields the same
clusters.

Similarity between two normalised keywords:
  - 1.0 for an exact match
  - 0.8 when one is a substring of the other
  - otherwise 1 - levenshtein(a, b) / max(len(a), len(b))
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Optional, Sequence

from rapidfuzz.distance import Levenshtein

from ...config import ClustererConfig
from ...schemas.theme_schema import KeywordCluster

logger = logging.getLogger(__name__)

# Checked in order; the first suffix that leaves >= 3 characters is removed.
_STEM_SUFFIXES: tuple[str, ...] = ("ing", "ed", "ly", "s", "es", "ies")

# Similarity assigned to the synthetic "other" cluster built by merge_clusters.
# No per-member value is computed for it.
OTHER_CLUSTER_SIMILARITY = 0.5


def string_similarity(a: str, b: str) -> float:
    """Similarity of two already-normalised strings, in [0, 1]."""
    if a == b:
        return 1.0
    if a in b or b in a:
        return 0.8
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / max_len


class KeywordClusterer:
    def __init__(self, config: Optional[ClustererConfig] = None):
        self.config = config or ClustererConfig()

    # ------------------------------------------------------------------ #
    #  Normalisation                                                      #
    # ------------------------------------------------------------------ #
    def normalize(self, keyword: str) -> str:
        normalized = keyword.lower().strip()
        if self.config.use_stemming:
            normalized = self._stem(normalized)
        return normalized

    @staticmethod
    def _stem(word: str) -> str:
        for suffix in _STEM_SUFFIXES:
            if word.endswith(suffix) and len(word) > len(suffix) + 2:
                return word[: -len(suffix)]
        return word

    # ------------------------------------------------------------------ #
    #  Clustering                                                         #
    # ------------------------------------------------------------------ #
    def cluster(self, keywords: Sequence[str]) -> List[KeywordCluster]:
        """Group *keywords* into similarity clusters, largest first.

        Members keep their original spelling and duplicates count
        individually. A keyword joins the cluster with the highest mean
        similarity to its current members when that score reaches the
        threshold; ties go to the earliest cluster.
        """
        if not keywords:
            return []

        # (representative, original members, normalised members), in creation order
        clusters: List[tuple[str, List[str], List[str]]] = []

        for original in keywords:
            normalized = self.normalize(original)

            best_index: Optional[int] = None
            best_score = 0.0
            for index, (_, _, norm_members) in enumerate(clusters):
                score = self._mean_similarity(normalized, norm_members)
                if best_index is None or score > best_score:
                    best_index, best_score = index, score

            if best_index is not None and best_score >= self.config.similarity_threshold:
                _, members, norm_members = clusters[best_index]
                members.append(original)
                norm_members.append(normalized)
            else:
                clusters.append((original, [original], [normalized]))

        result: List[KeywordCluster] = []
        for rep, members, norm_members in clusters:
            if len(members) < self.config.min_cluster_size:
                continue
            result.append(
                KeywordCluster(
                    representative=rep,
                    keywords=sorted(members),
                    similarity=self._cluster_similarity(norm_members),
                )
            )

        # Stable sort keeps insertion order among equal sizes
        result.sort(key=lambda c: len(c.keywords), reverse=True)
        logger.debug("[CLUSTER] %d keywords -> %d clusters", len(keywords), len(result))
        return result

    @staticmethod
    def _mean_similarity(candidate: str, members: Sequence[str]) -> float:
        if not members:
            return 0.0
        return sum(string_similarity(candidate, m) for m in members) / len(members)

    @staticmethod
    def _cluster_similarity(members: Sequence[str]) -> float:
        if len(members) <= 1:
            return 1.0
        total = 0.0
        comparisons = 0
        for i in range(len(members)):
            for j in range(i + 1, len(members)):
                total += string_similarity(members[i], members[j])
                comparisons += 1
        return total / comparisons

    # ------------------------------------------------------------------ #
    #  Merging                                                            #
    # ------------------------------------------------------------------ #
    def merge_clusters(
        self, clusters: Sequence[KeywordCluster], max_clusters: int
    ) -> List[KeywordCluster]:
        """Cap the number of clusters at *max_clusters*.

        The ``max_clusters - 1`` largest clusters are kept untouched and all
        others are folded into one ``"other"`` cluster holding the union of
        their keywords.
        """
        if max_clusters < 1:
            raise ValueError("max_clusters must be at least 1")
        if len(clusters) <= max_clusters:
            return list(clusters)

        ordered = sorted(clusters, key=lambda c: len(c.keywords), reverse=True)
        kept = ordered[: max_clusters - 1]
        folded = ordered[max_clusters - 1 :]

        merged_keywords = sorted({kw for c in folded for kw in c.keywords})
        kept.append(
            KeywordCluster(
                representative="other",
                keywords=merged_keywords,
                similarity=OTHER_CLUSTER_SIMILARITY,
            )
        )
        logger.debug("[CLUSTER] Folded %d clusters into 'other'", len(folded))
        return kept


def create_keyword_clusterer(**overrides: Any) -> KeywordClusterer:
    """Clusterer with default config, optionally overriding single fields."""
    return KeywordClusterer(replace(ClustererConfig(), **overrides))
