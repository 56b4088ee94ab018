"""
Distance to Textual Complement anomaly scoring.

Each document is compared with the rest of the corpus (its complement). Both
are reduced to token-count histograms over frequency-rank buckets, normalized
to unit mass, and compared with the Manhattan (L1) distance. Scores range from
0 (the document looks exactly like the rest of the corpus) to 2 (disjoint
bucket distributions).

See http://nlp.shef.ac.uk/Completed_PhD_Projects/guthrie.pdf for the method.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING
import logging

import numpy as np

from anomalous_text.config import ScorerConfig
from anomalous_text.corpus import Corpus
from anomalous_text.exceptions import (
    DegenerateCorpusError,
    EmptyDocumentError,
    InvalidConfigurationError,
)
from anomalous_text.ranking_utils import score_rows_parallel

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class AnomalyScorer:
    """
    Scores every document of a Corpus against its complement.

    The corpus is checked on construction, so a scorer only exists for
    corpora where every score is defined.

    Args:
        corpus (Corpus): Corpus with bucket statistics.
        config (ScorerConfig | None): Worker settings. Its bucket boundaries
            must match the corpus; defaults to a config built from them.

    Raises:
        InvalidConfigurationError: ``config`` uses different bucket boundaries than ``corpus``.
        DegenerateCorpusError: The corpus has no tokens, or one document holds all of them.
        EmptyDocumentError: A document has no tokens.
    """

    def __init__(self, corpus: Corpus, config: ScorerConfig | None = None):
        if config is None:
            config = ScorerConfig(bucket_boundaries=corpus.bucket_boundaries)
        elif config.bucket_boundaries != corpus.bucket_boundaries:
            raise InvalidConfigurationError(
                f"Config bucket boundaries {config.bucket_boundaries} do not match "
                f"the corpus boundaries {corpus.bucket_boundaries}."
            )
        self.corpus = corpus
        self.config = config
        self.check()

    def check(self) -> None:
        """Raise if any document's score would divide by zero."""
        lengths = self.corpus.document_length
        total = int(lengths.sum())
        if total == 0:
            raise DegenerateCorpusError("Corpus contains no tokens.")

        empty = np.flatnonzero(lengths == 0)
        if empty.size:
            raise EmptyDocumentError(int(empty[0]))

        whole = np.flatnonzero(lengths == total)
        if whole.size:
            index = int(whole[0])
            raise DegenerateCorpusError(
                f"Document {index} contains every token in the corpus; its complement is empty.",
                document_index=index,
            )

    @staticmethod
    def score_block(
        document_vectors: NDArray[np.float64],
        universe_vector: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """
        L1 distance between each normalized document vector and its normalized complement.

        Args:
            document_vectors: Bucket counts, one row per document (k, n_buckets).
            universe_vector: Bucket counts over the whole corpus (n_buckets,).

        Returns:
            k scores.
        """
        document_token_count = document_vectors.sum(axis=1, keepdims=True)
        complement_token_count = universe_vector.sum() - document_token_count
        complement = (universe_vector - document_vectors) / complement_token_count
        normalized = document_vectors / document_token_count
        return np.abs(normalized - complement).sum(axis=1)

    @staticmethod
    def score_kernel(
        document_vector: NDArray[np.float64],
        universe_vector: NDArray[np.float64],
    ) -> float:
        """Score a single document vector against the universe vector."""
        block = np.asarray(document_vector, dtype=np.float64)[np.newaxis, :]
        universe = np.asarray(universe_vector, dtype=np.float64)
        return float(AnomalyScorer.score_block(block, universe)[0])

    def score(self, index: int) -> float:
        return self.score_kernel(self.corpus.bucket_matrix[index], self.corpus.universe_vector)

    def score_all(self) -> NDArray[np.float64]:
        """Scores for every document, in corpus order."""
        universe_vector = self.corpus.universe_vector

        def row_scorer(rows: NDArray[np.float64]) -> NDArray[np.float64]:
            return self.score_block(rows, universe_vector)

        return score_rows_parallel(
            self.corpus.bucket_matrix,
            row_scorer,
            num_workers=self.config.num_workers,
            min_rows_for_parallel=self.config.min_documents_for_parallel,
        )


def score_documents(
    documents: Iterable[Iterable[str]],
    config: ScorerConfig | None = None,
) -> NDArray[np.float64]:
    """
    Anomaly score for each tokenized document, in the order given.

    Args:
        documents: Tokenized documents. Tokenization is the caller's job.
        config: Bucket boundaries and worker settings. Defaults to ScorerConfig().

    Returns:
        float64 array of scores aligned with ``documents``.

    Raises:
        MalformedInputError: The corpus, a document or a token is None or the wrong type.
        DegenerateCorpusError: No tokens at all, or one document holds every token.
        EmptyDocumentError: A document has no tokens.
    """
    config = config or ScorerConfig()
    corpus = Corpus(documents, bucket_boundaries=config.bucket_boundaries)
    scores = AnomalyScorer(corpus, config).score_all()
    logger.debug("Scored %d documents", len(scores))
    return scores
