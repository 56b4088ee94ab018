import math

import numpy as np
import pytest

from anomalous_text.config import DEFAULT_BUCKET_BOUNDARIES
from anomalous_text.corpus import Corpus, validate_documents
from anomalous_text.exceptions import InvalidConfigurationError, MalformedInputError


@pytest.fixture
def corpus():
    documents = [
        ["b", "a", "c", "a"],
        ["c", "d"],
        ["a", "e"],
    ]
    return Corpus(documents, bucket_boundaries=(1, 3, math.inf))


def test_sequence_interface(corpus):
    assert len(corpus) == 3
    assert corpus[1] == ("c", "d")
    assert list(corpus) == [("b", "a", "c", "a"), ("c", "d"), ("a", "e")]


def test_token_count(corpus):
    assert corpus.token_count == {"a": 3, "b": 1, "c": 2, "d": 1, "e": 1}


def test_ranked_tokens_break_ties_by_value(corpus):
    assert corpus.ranked_tokens == ["a", "c", "b", "d", "e"]


def test_ranking_ignores_document_order():
    documents = [["z", "y"], ["x", "y"], ["w"]]
    forward = Corpus(documents)
    backward = Corpus(list(reversed(documents)))
    assert forward.ranked_tokens == backward.ranked_tokens == ["y", "w", "x", "z"]


def test_token_to_bucket(corpus):
    # rank 0 -> bucket 0, ranks 1-2 -> bucket 1, ranks 3+ -> bucket 2
    assert dict(corpus.token_to_bucket) == {"a": 0, "c": 1, "b": 1, "d": 2, "e": 2}


def test_token_to_bucket_is_read_only(corpus):
    with pytest.raises(TypeError):
        corpus.token_to_bucket["a"] = 2


@pytest.mark.parametrize(
    "rank, expected_bucket",
    [
        (0, 0),
        (99, 0),
        (100, 1),
        (299, 1),
        (300, 2),
        (999, 2),
        (1000, 3),
    ],
)
def test_default_boundaries_bucket_assignment(rank, expected_bucket):
    # Token "t0000" has the highest count, "t0001" the next, and so on
    n_tokens = rank + 1
    documents = [[f"t{i:04d}"] * (n_tokens - i) for i in range(n_tokens)]
    corpus = Corpus(documents)
    assert corpus.ranked_tokens[rank] == f"t{rank:04d}"
    assert corpus.token_to_bucket[f"t{rank:04d}"] == expected_bucket


def test_bucket_matrix(corpus):
    expected = np.array(
        [
            [2.0, 2.0, 0.0],
            [0.0, 1.0, 1.0],
            [1.0, 0.0, 1.0],
        ]
    )
    np.testing.assert_array_equal(corpus.bucket_matrix, expected)
    np.testing.assert_array_equal(corpus.bucket_matrix.sum(axis=1), corpus.document_length)
    np.testing.assert_array_equal(corpus.universe_vector, [3.0, 3.0, 2.0])


def test_bucket_matrix_counts_repeated_tokens():
    documents = [
        ["x"] * 500 + ["y"] * 3 + ["z"],
        ["y", "z", "z"],
        ["w"] * 40,
    ]
    corpus = Corpus(documents, bucket_boundaries=(1, 2, math.inf))
    # x (500) -> bucket 0, w (40) -> bucket 1, y (4) and z (3) -> bucket 2
    expected = np.array(
        [
            [500.0, 0.0, 4.0],
            [0.0, 0.0, 3.0],
            [0.0, 40.0, 0.0],
        ]
    )
    np.testing.assert_array_equal(corpus.bucket_matrix, expected)
    np.testing.assert_array_equal(corpus.universe_vector, [500.0, 40.0, 7.0])


def test_bucket_matrix_has_fixed_width():
    corpus = Corpus([["a"], ["b"]])
    assert corpus.bucket_matrix.shape == (2, len(DEFAULT_BUCKET_BOUNDARIES))
    assert corpus.n_buckets == 13


def test_shared_arrays_are_read_only(corpus):
    with pytest.raises(ValueError):
        corpus.bucket_matrix[0, 0] = 5.0
    with pytest.raises(ValueError):
        corpus.universe_vector[0] = 5.0


def test_corpus_copies_input():
    documents = [["a", "b"], ["c"]]
    corpus = Corpus(documents)
    documents[0].append("z")
    assert corpus[0] == ("a", "b")
    assert "z" not in corpus.token_count


def test_validate_documents_returns_tuples():
    assert validate_documents([["a"], ("b", "c"), []]) == (("a",), ("b", "c"), ())


def test_malformed_token_reports_position():
    with pytest.raises(MalformedInputError) as excinfo:
        Corpus([["a"], ["b", "c", None]])
    assert excinfo.value.document_index == 1
    assert excinfo.value.token_index == 2


def test_invalid_boundaries_rejected():
    with pytest.raises(InvalidConfigurationError):
        Corpus([["a"], ["b"]], bucket_boundaries=(10, 5, math.inf))
