"""Errors raised while validating input or scoring a corpus."""

from __future__ import annotations


class AnomalyScoringError(ValueError):
    """Base class for every error raised by anomaly scoring."""


class InvalidConfigurationError(AnomalyScoringError):
    """Bucket boundaries or worker settings are unusable."""


class MalformedInputError(AnomalyScoringError):
    """
    The corpus is not a sequence of token sequences.

    Attributes:
        document_index (int | None): Offending document, if any.
        token_index (int | None): Offending token inside that document, if any.
    """

    def __init__(
        self,
        message: str,
        document_index: int | None = None,
        token_index: int | None = None,
    ):
        super().__init__(message)
        self.document_index = document_index
        self.token_index = token_index


class EmptyDocumentError(AnomalyScoringError):
    """A document has no tokens, so its bucket distribution is undefined."""

    def __init__(self, document_index: int):
        super().__init__(f"Document {document_index} contains no tokens.")
        self.document_index = document_index


class DegenerateCorpusError(AnomalyScoringError):
    """
    The corpus has no tokens, or one document holds all of them and its
    complement is empty.
    """

    def __init__(self, message: str, document_index: int | None = None):
        super().__init__(message)
        self.document_index = document_index
