"""
Tests for chunking, pooling, preview and pagination helpers.
"""
import math
from itertools import permutations

import pytest

from shared.helper.vector_utils import (
    PREVIEW_MARKER,
    clamp_pagination,
    distance_to_similarity,
    make_preview,
    mean_pool,
    split_text,
)


class TestSplitText:

    @pytest.mark.parametrize("length,chunk_size", [(1, 2000), (1999, 2000), (2000, 2000), (2001, 2000), (4500, 2000), (10, 3)])
    def test_chunk_count_and_reconstruction(self, length, chunk_size):
        text = "".join(chr(ord("a") + i % 26) for i in range(length))
        chunks = split_text(text, chunk_size)
        assert len(chunks) == math.ceil(length / chunk_size)
        assert "".join(chunks) == text
        assert all(len(chunk) <= chunk_size for chunk in chunks)

    def test_final_chunk_is_remainder(self):
        chunks = split_text("x" * 4500, 2000)
        assert [len(c) for c in chunks] == [2000, 2000, 500]

    def test_empty_text_has_no_chunks(self):
        assert split_text("", 2000) == []

    def test_splits_mid_word(self):
        assert split_text("hello world", 4) == ["hell", "o wo", "rld"]

    def test_non_positive_chunk_size_rejected(self):
        with pytest.raises(ValueError):
            split_text("abc", 0)


class TestMeanPool:

    def test_element_wise_mean(self):
        assert mean_pool([[1.0, 2.0, 3.0], [3.0, 4.0, 5.0]]) == [2.0, 3.0, 4.0]

    def test_single_vector_is_unchanged(self):
        assert mean_pool([[0.25, -0.5]]) == [0.25, -0.5]

    def test_order_independent(self):
        vectors = [[0.1, 0.7, -0.3], [0.4, -0.2, 0.9], [1e-3, 0.333, 0.25]]
        results = {tuple(mean_pool(list(p))) for p in permutations(vectors)}
        assert len(results) == 1

    def test_different_lengths_rejected(self):
        with pytest.raises(ValueError):
            mean_pool([[1.0, 2.0], [1.0]])

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            mean_pool([])


class TestPreview:

    def test_short_text_has_no_marker(self):
        assert make_preview("short", 500) == "short"

    def test_exact_length_has_no_marker(self):
        assert make_preview("a" * 500, 500) == "a" * 500

    def test_long_text_is_truncated_with_marker(self):
        preview = make_preview("a" * 501, 500)
        assert preview == "a" * 500 + PREVIEW_MARKER


class TestScoring:

    def test_identical_vectors_score_one(self):
        assert distance_to_similarity(0.0) == 1.0

    def test_opposite_vectors_score_minus_one(self):
        assert distance_to_similarity(2.0) == -1.0


class TestClampPagination:

    def test_defaults(self):
        assert clamp_pagination(None, None, default_limit=10) == (10, 1, 0)

    def test_offset(self):
        assert clamp_pagination(10, 2, default_limit=10) == (10, 2, 10)

    def test_clamps_out_of_range_values(self):
        assert clamp_pagination(0, -3, default_limit=10) == (1, 1, 0)
        assert clamp_pagination(1000, 1, default_limit=50) == (100, 1, 0)
