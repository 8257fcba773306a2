"""
Vote persistence layer.

Async SQLAlchemy engine/session plumbing, the ``votes`` ORM model, and the
``VoteStore`` query interface the services are written against.
"""
