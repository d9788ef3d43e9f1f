"""Production adapters for ipdocket ports."""
