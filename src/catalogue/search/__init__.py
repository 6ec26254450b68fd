"""Search indexer factory.

Provides get_indexer() / set_indexer() to swap implementations. Defaults
to the in-memory FakeSearchIndexer.
"""

from catalogue.search.fake_indexer import FakeSearchIndexer
from catalogue.search.port import SearchIndexer

_current_indexer: SearchIndexer | None = None


def get_indexer() -> SearchIndexer:
    global _current_indexer
    if _current_indexer is None:
        _current_indexer = FakeSearchIndexer()
    return _current_indexer


def set_indexer(indexer: SearchIndexer) -> None:
    global _current_indexer
    _current_indexer = indexer


def reset_indexer() -> None:
    global _current_indexer
    _current_indexer = None
