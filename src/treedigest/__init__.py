"""
Directory and repository ingestion into a single text digest.

Usage::

    from treedigest import ingest

    result = ingest("path/to/project", exclude_patterns=["*.lock"])
    print(result.summary)
    print(result.structure)
    print(result.content)
"""

from treedigest.ingestion import ingest, ingest_directory, ingest_file, ingest_local, ingest_remote
from treedigest.query import Query, parse_query
from treedigest.types import IngestResult, Node, RunStats

__all__ = [
    "IngestResult",
    "Node",
    "Query",
    "RunStats",
    "ingest",
    "ingest_directory",
    "ingest_file",
    "ingest_local",
    "ingest_remote",
    "parse_query",
]
