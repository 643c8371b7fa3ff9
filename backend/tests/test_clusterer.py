"""Keyword clustering tests — similarity, normalisation, greedy grouping, merging."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from signalscope.analysis.themes.clusterer import (
    OTHER_CLUSTER_SIMILARITY,
    KeywordClusterer,
    create_keyword_clusterer,
    string_similarity,
)
from signalscope.config import ClustererConfig
from signalscope.schemas.theme_schema import KeywordCluster


class TestStringSimilarity:
    def test_exact_match(self):
        assert string_similarity("slow", "slow") == 1.0

    def test_substring(self):
        assert string_similarity("slow", "slowness") == 0.8
        assert string_similarity("slowness", "slow") == 0.8

    def test_edit_distance(self):
        # kitten -> sitting is 3 edits over 7 characters
        assert string_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_completely_different(self):
        assert string_similarity("abc", "xyz") == 0.0


class TestNormalize:
    def test_lowercases_and_trims(self):
        clusterer = KeywordClusterer(ClustererConfig(use_stemming=False))
        assert clusterer.normalize("  Expensive ") == "expensive"

    def test_stems_common_suffixes(self):
        clusterer = KeywordClusterer()
        assert clusterer.normalize("crashing") == "crash"
        assert clusterer.normalize("bugs") == "bug"
        assert clusterer.normalize("slowly") == "slow"

    def test_short_words_are_not_stemmed(self):
        clusterer = KeywordClusterer()
        assert clusterer.normalize("bus") == "bus"
        assert clusterer.normalize("red") == "red"

    def test_stemming_disabled(self):
        clusterer = KeywordClusterer(ClustererConfig(use_stemming=False))
        assert clusterer.normalize("crashing") == "crashing"


class TestCluster:
    def test_empty_input(self):
        assert KeywordClusterer().cluster([]) == []

    def test_identical_keywords_form_one_cluster(self):
        clusters = KeywordClusterer().cluster(["expensive", "expensive", "expensive"])
        assert len(clusters) == 1
        assert clusters[0].representative == "expensive"
        assert len(clusters[0].keywords) == 3
        assert clusters[0].similarity == 1.0

    def test_case_and_whitespace_variants_cluster_together(self):
        clusters = KeywordClusterer().cluster(["Expensive", "EXPENSIVE", " expensive "])
        assert len(clusters) == 1
        assert clusters[0].representative == "Expensive"
        assert sorted(clusters[0].keywords) == clusters[0].keywords

    def test_dissimilar_keywords_stay_apart(self):
        clusters = KeywordClusterer().cluster(["slow", "expensive"])
        assert len(clusters) == 2

    def test_largest_cluster_first(self):
        clusters = KeywordClusterer().cluster(["slow", "expensive", "expensive", "expensive"])
        assert [c.representative for c in clusters] == ["expensive", "slow"]

    def test_min_cluster_size_drops_small_clusters(self):
        clusterer = KeywordClusterer(ClustererConfig(min_cluster_size=2))
        clusters = clusterer.cluster(["slow", "slow", "expensive"])
        assert len(clusters) == 1
        assert clusters[0].representative == "slow"

    def test_deterministic(self):
        keywords = ["crash", "crashes", "crashing", "slow", "slowness", "price", "pricing"]
        clusterer = KeywordClusterer()
        assert clusterer.cluster(keywords) == clusterer.cluster(list(keywords))

    def test_similarity_in_unit_interval(self):
        clusters = KeywordClusterer().cluster(["crash", "crashes", "slow", "slowness", "ui"])
        for cluster in clusters:
            assert 0.0 <= cluster.similarity <= 1.0


class TestMergeClusters:
    def _clusters(self):
        return [
            KeywordCluster(representative="a", keywords=["a", "a", "a", "a"], similarity=1.0),
            KeywordCluster(representative="b", keywords=["b", "b", "b"], similarity=1.0),
            KeywordCluster(representative="c", keywords=["c", "c"], similarity=1.0),
            KeywordCluster(representative="d", keywords=["d", "e"], similarity=0.0),
        ]

    def test_no_merge_when_under_limit(self):
        clusters = self._clusters()
        assert KeywordClusterer().merge_clusters(clusters, 10) == clusters

    def test_merges_into_other(self):
        merged = KeywordClusterer().merge_clusters(self._clusters(), 2)
        assert len(merged) == 2
        assert merged[0].representative == "a"
        other = merged[-1]
        assert other.representative == "other"
        assert set(other.keywords) == {"b", "c", "d", "e"}
        assert other.similarity == OTHER_CLUSTER_SIMILARITY

    def test_result_size_is_min_of_limit_and_count(self):
        clusters = self._clusters()
        for limit in range(1, 6):
            merged = KeywordClusterer().merge_clusters(clusters, limit)
            assert len(merged) == min(limit, len(clusters))

    def test_limit_below_one_rejected(self):
        with pytest.raises(ValueError):
            KeywordClusterer().merge_clusters(self._clusters(), 0)


class TestConfig:
    def test_threshold_out_of_range(self):
        with pytest.raises(ValueError):
            ClustererConfig(similarity_threshold=1.5)

    def test_factory_overrides(self):
        clusterer = create_keyword_clusterer(similarity_threshold=0.9)
        assert clusterer.config.similarity_threshold == 0.9
        assert clusterer.config.use_stemming is True
