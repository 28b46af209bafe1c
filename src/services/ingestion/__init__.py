"""Ingestion pipeline that turns a content tree into the wiki's site indexes.

Pipeline stages:

1. **Fetch** (IEntrySource) -- a tarball download or a directory walk yields
   a flat stream of files and directories.

2. **Classify** (classifier.py / EntryClassifier) -- each entry becomes a
   topic, a listed sub-directory, a page, an index page, or is ignored.

3. **Build** (index_builder.py / SiteIndexBuilder) -- a fresh builder per
   pass fills the page map, hierarchy, topic list and page tree.

4. **Publish** (live_index.py / LiveIndex) -- the frozen IndexSet replaces
   the previous one in a single reference swap.

The IngestionCoordinator (coordinator.py) drives all four stages and owns
the pass state machine.
"""

from src.services.ingestion.classifier import EntryClassifier
from src.services.ingestion.coordinator import IngestionCoordinator
from src.services.ingestion.index_builder import SiteIndexBuilder
from src.services.ingestion.live_index import LiveIndex

__all__ = [
    "EntryClassifier",
    "IngestionCoordinator",
    "LiveIndex",
    "SiteIndexBuilder",
]
