"""Data transfer objects returned by application services."""
