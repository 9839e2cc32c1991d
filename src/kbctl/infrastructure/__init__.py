"""Infrastructure layer — corpus store, link graph, filesystem and SQLite.

May import from domain and config. Must never import from services,
commands, or output.
"""
