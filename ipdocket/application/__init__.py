"""Application layer for ipdocket: ports and use-case services."""
