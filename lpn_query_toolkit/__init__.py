"""LPN Query Toolkit - verify LPN query proofs and release their results."""

__version__ = "0.1.0"

from .query import (
    ProofBundle,
    Query,
    QueryIdentifier,
    QueryProcessor,
    QueryVerificationService,
    process_query,
)

__all__ = [
    "ProofBundle",
    "Query",
    "QueryIdentifier",
    "QueryProcessor",
    "QueryVerificationService",
    "process_query",
]
