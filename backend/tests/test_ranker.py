import math

import pytest

from studymate.services.ranker import SimilarityCandidate, cosine_similarity, rank


def _c(id_, vector, metadata=None):
    return SimilarityCandidate(id=id_, vector=vector, metadata=metadata)


class TestCosineSimilarity:
    def test_identical_vectors(self):
        assert cosine_similarity([3.0, 4.0], [3.0, 4.0]) == pytest.approx(1.0)

    def test_magnitude_does_not_matter(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [2.0, 4.0, 6.0]) == pytest.approx(1.0)

    def test_orthogonal(self):
        assert cosine_similarity([1, 0], [0, 1]) == 0.0

    def test_opposite(self):
        assert cosine_similarity([1, 2], [-1, -2]) == pytest.approx(-1.0)

    def test_symmetric(self):
        a = [0.12, -0.5, 0.33, 0.9]
        b = [0.7, 0.1, -0.2, 0.05]
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    @pytest.mark.parametrize(
        "a,b",
        [
            ([1, 0], [1, 0, 0]),   # length mismatch
            ([0, 0], [1, 1]),      # zero vector
            ([1, 1], [0, 0]),
            ([], []),              # empty
        ],
    )
    def test_degenerate_inputs_score_zero(self, a, b):
        assert cosine_similarity(a, b) == 0.0

    def test_returns_plain_float(self):
        assert isinstance(cosine_similarity([1, 2], [2, 1]), float)


class TestRank:
    def test_reference_scenario(self):
        a = _c("A", [1, 0])
        result = rank([1, 0], [a, _c("B", [0, 1]), _c("C", [])], min_score=0.3, limit=10)
        assert [(r.candidate.id, r.score) for r in result] == [("A", pytest.approx(1.0))]
        assert result[0].candidate is a

    def test_skips_candidates_without_vectors(self):
        result = rank([1, 0], [_c("none", None), _c("empty", [])], min_score=-1.0, limit=10)
        assert result == []

    def test_sorted_best_first(self):
        candidates = [
            _c("low", [1, 1]),
            _c("high", [1, 0.05]),
            _c("mid", [1, 0.5]),
        ]
        result = rank([1, 0], candidates, min_score=0.3, limit=10)
        assert [r.candidate.id for r in result] == ["high", "mid", "low"]
        scores = [r.score for r in result]
        assert scores == sorted(scores, reverse=True)

    def test_limit(self):
        candidates = [_c(str(i), [1, i * 0.1]) for i in range(8)]
        result = rank([1, 0], candidates, min_score=0.3, limit=3)
        assert len(result) == 3
        assert [r.candidate.id for r in result] == ["0", "1", "2"]

    def test_zero_limit_returns_nothing(self):
        assert rank([1, 0], [_c("A", [1, 0])], min_score=0.3, limit=0) == []

    def test_min_score_is_exclusive(self):
        # Exact match scores exactly 1.0, which is not above a 1.0 floor
        assert rank([1, 0], [_c("A", [1, 0])], min_score=1.0, limit=10) == []

    def test_every_score_above_floor(self):
        candidates = [_c(str(i), [math.cos(i / 4), math.sin(i / 4)]) for i in range(12)]
        result = rank([1, 0], candidates, min_score=0.3, limit=10)
        assert result
        assert all(r.score > 0.3 for r in result)

    def test_ties_keep_input_order(self):
        candidates = [_c("first", [2, 0]), _c("second", [1, 0]), _c("third", [5, 0])]
        result = rank([1, 0], candidates, min_score=0.3, limit=10)
        assert [r.candidate.id for r in result] == ["first", "second", "third"]

    def test_mismatched_dimensions_are_dropped_not_raised(self):
        result = rank([1, 0], [_c("bad", [1, 0, 0]), _c("good", [1, 0])], 0.3, 10)
        assert [r.candidate.id for r in result] == ["good"]

    def test_metadata_passes_through(self):
        meta = {"title": "Cells", "tags": ["bio"]}
        result = rank([1, 0], [_c("A", [1, 0], meta)], 0.3, 10)
        assert result[0].candidate.metadata is meta

    def test_empty_input(self):
        assert rank([1, 0], [], 0.3, 10) == []

    def test_accepts_generator(self):
        result = rank([1, 0], (_c(str(i), [1, 0]) for i in range(3)), 0.3, 2)
        assert len(result) == 2
