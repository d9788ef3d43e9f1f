"""Infrastructure layer: stubs, adapters and observability for ipdocket."""
