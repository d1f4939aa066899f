"""
Document verification for document-gated criteria.

Profiles carry their documents under ``documents``, either keyed by proof
type::

    {"documents": {"aadhaar": {"verified": true}}}

or as a list of entries naming their type::

    {"documents": [{"type": "aadhaar", "verified": true}]}
"""

from typing import Any, Iterable, Iterator, Mapping, Tuple


def iter_documents(subject: Mapping[str, Any]) -> Iterator[Tuple[str, Mapping[str, Any]]]:
    """Yield ``(proof_type, document)`` pairs held by a subject."""
    documents = subject.get("documents")
    if isinstance(documents, Mapping):
        for proof_type, document in documents.items():
            if isinstance(document, Mapping):
                yield proof_type, document
    elif isinstance(documents, list):
        for document in documents:
            if isinstance(document, Mapping):
                proof_type = document.get("type", document.get("documentType"))
                if isinstance(proof_type, str):
                    yield proof_type, document


class DocumentVerifier:
    """Decides whether a subject holds an acceptable proof.

    The default oracle trusts the ``verified`` flag already set on the
    document. Subclass and override ``is_verified`` to consult a
    credential checker.
    """

    def is_verified(self, document: Mapping[str, Any]) -> bool:
        return document.get("verified") is True

    def has_valid_document(self, subject: Mapping[str, Any], allowed_types: Iterable[str]) -> bool:
        """True when at least one verified document has an allowed type."""
        allowed = set(allowed_types)
        if not allowed:
            return True
        return any(
            proof_type in allowed and self.is_verified(document)
            for proof_type, document in iter_documents(subject)
        )
