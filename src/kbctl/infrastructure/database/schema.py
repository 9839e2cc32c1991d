"""SQLAlchemy Core table definitions for the corpus snapshot.

A snapshot is one row per accepted document (metadata and body-derived
extractions as JSON) plus the resolved link graph. Saving replaces the
previous snapshot wholesale.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, Table, Text

metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("path", Text, primary_key=True),
    Column("name", Text, nullable=False, unique=True),
    Column("category", Text, nullable=False),
    Column("kind", Text, nullable=False),
    Column("title", Text, nullable=False),
    Column("metadata", Text, nullable=False),  # JSON object
    Column("body", Text, nullable=False),
    Column("links_out", Text, nullable=False),  # JSON array of wikilinks
    Column("directives", Text, nullable=False),  # JSON array of directives
)

links = Table(
    "links",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source_path", Text, ForeignKey("documents.path"), nullable=False),
    Column("target_name", Text, nullable=False),
    Column("target_path", Text, ForeignKey("documents.path")),
    Column("resolved", Integer, nullable=False),
    Column("line", Integer, nullable=False, default=0, server_default="0"),
)

snapshot_info = Table(
    "snapshot_info",
    metadata,
    Column("key", Text, primary_key=True),
    Column("value", Text, nullable=False),
)

Index("ix_documents_category", documents.c.category)
Index("ix_links_source", links.c.source_path)
Index("ix_links_target", links.c.target_path)
