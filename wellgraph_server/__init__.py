"""HTTP surface for the wellgraph topology builder."""
