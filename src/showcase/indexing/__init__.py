"""Content index: story discovery, indexing and summaries."""
from showcase.indexing.generator import StoryIndexGenerator
from showcase.indexing.handle import IndexHandle
from showcase.indexing.indexers import Indexer, json_indexer
from showcase.indexing.normalize import NormalizedSpecifier, normalize_stories
from showcase.indexing.summarize import summarize_index

__all__ = [
    "IndexHandle",
    "Indexer",
    "NormalizedSpecifier",
    "StoryIndexGenerator",
    "json_indexer",
    "normalize_stories",
    "summarize_index",
]
