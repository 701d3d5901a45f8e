"""Adapters for mirroring topology request lineage."""

from wellgraph.adapters.sinks import FileSink, LineageSink, ListSink

__all__ = [
    "FileSink",
    "LineageSink",
    "ListSink",
]
