"""
Tokenized corpus with the frequency-rank statistics used for anomaly scoring.

Building a Corpus is the whole-corpus phase of scoring: every document must be
seen before a token's global rank, and therefore its bucket, is known. After
the cached properties below are computed they are read-only and can be shared
by the per-document phase without coordination.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Mapping, Sequence
from functools import cached_property
from types import MappingProxyType
import logging

import numpy as np
from scipy.sparse import csr_matrix, lil_matrix

from anomalous_text.config import DEFAULT_BUCKET_BOUNDARIES, validate_bucket_boundaries
from anomalous_text.exceptions import MalformedInputError

logger = logging.getLogger(__name__)


def validate_documents(documents: Iterable[Iterable[str]]) -> tuple[tuple[str, ...], ...]:
    """
    Reject malformed input and return an immutable copy of the corpus.

    A corpus must be an iterable of documents, and each document an iterable of
    ``str`` tokens. A bare string is not accepted as a document.

    Raises:
        MalformedInputError: On a None corpus, document or token, or any
            non-iterable document or non-string token.
    """
    if documents is None:
        raise MalformedInputError("Corpus must not be None.")
    if isinstance(documents, str):
        raise MalformedInputError("Corpus must be a sequence of documents, not a string.")
    try:
        documents = list(documents)
    except TypeError as e:
        raise MalformedInputError(f"Corpus is not iterable: {e}") from e

    validated = []
    for doc_idx, document in enumerate(documents):
        if document is None:
            raise MalformedInputError(f"Document {doc_idx} is None.", document_index=doc_idx)
        if isinstance(document, str):
            raise MalformedInputError(
                f"Document {doc_idx} is a string; pass a sequence of tokens instead.",
                document_index=doc_idx,
            )
        try:
            tokens = tuple(document)
        except TypeError as e:
            raise MalformedInputError(
                f"Document {doc_idx} is not iterable: {e}", document_index=doc_idx
            ) from e
        for token_idx, token in enumerate(tokens):
            if not isinstance(token, str):
                raise MalformedInputError(
                    f"Token {token_idx} of document {doc_idx} is {token!r}, expected a string.",
                    document_index=doc_idx,
                    token_index=token_idx,
                )
        validated.append(tokens)
    return tuple(validated)


class Corpus:
    """
    A validated collection of tokenized documents and their bucket statistics.

    Args:
        documents: Tokenized documents. Each document is a sequence of terms.
        bucket_boundaries: Ascending rank thresholds, last one ``math.inf``.

    Attributes:
        documents (tuple[tuple[str, ...], ...]): Immutable copy of the input.
        document_count (int): Number of documents.
        bucket_boundaries (tuple[float, ...]): Validated boundaries.
        n_buckets (int): Length of every bucket vector.
    """

    def __init__(
        self,
        documents: Iterable[Iterable[str]],
        bucket_boundaries: Sequence[float] = DEFAULT_BUCKET_BOUNDARIES,
    ):
        self.documents = validate_documents(documents)
        self.document_count = len(self.documents)
        self.bucket_boundaries = validate_bucket_boundaries(bucket_boundaries)
        self.n_buckets = len(self.bucket_boundaries)

    def __len__(self) -> int:
        return self.document_count

    def __getitem__(self, index: int) -> tuple[str, ...]:
        return self.documents[index]

    def __iter__(self) -> Iterator[tuple[str, ...]]:
        return iter(self.documents)

    @cached_property
    def document_length(self) -> np.ndarray:
        """Number of tokens in each document."""
        return np.array([len(doc) for doc in self.documents], dtype=np.int64)

    @cached_property
    def token_count(self) -> Counter[str]:
        """Occurrences of each distinct token across the whole corpus."""
        return Counter(token for doc in self.documents for token in doc)

    @cached_property
    def ranked_tokens(self) -> list[str]:
        """
        Distinct tokens, most frequent first.

        Tokens with equal counts are ordered by value so bucket assignment
        does not depend on document or token order.
        """
        counts = self.token_count
        return sorted(counts, key=lambda token: (-counts[token], token))

    @cached_property
    def token_to_bucket(self) -> Mapping[str, int]:
        """
        Read-only map from token to bucket index.

        The token at rank i lands in the smallest bucket b with
        i < bucket_boundaries[b].
        """
        ranks = np.arange(len(self.ranked_tokens))
        boundaries = np.asarray(self.bucket_boundaries, dtype=np.float64)
        buckets = np.searchsorted(boundaries, ranks, side="right")
        return MappingProxyType(
            {token: int(bucket) for token, bucket in zip(self.ranked_tokens, buckets)}
        )

    @cached_property
    def bucket_matrix(self) -> np.ndarray:
        """
        Per-document token counts by bucket, shape (document_count, n_buckets).

        Row i is the document vector of document i. The array is read-only.
        """
        token_to_bucket = self.token_to_bucket
        counts_lil = lil_matrix((self.document_count, self.n_buckets), dtype=np.float64)
        for doc_idx, doc in enumerate(self.documents):
            bucket_counts = Counter(token_to_bucket[token] for token in doc)
            for bucket, count in bucket_counts.items():
                counts_lil[doc_idx, bucket] = count

        matrix = csr_matrix(counts_lil).toarray()
        matrix.setflags(write=False)

        logger.debug(
            "Built bucket matrix: %d documents, %d tokens, %d distinct, %d/%d buckets occupied",
            self.document_count,
            int(self.document_length.sum()),
            len(token_to_bucket),
            int(np.count_nonzero(matrix.sum(axis=0))),
            self.n_buckets,
        )
        return matrix

    @cached_property
    def universe_vector(self) -> np.ndarray:
        """Token counts by bucket over the whole corpus."""
        vector = self.bucket_matrix.sum(axis=0)
        vector.setflags(write=False)
        return vector
