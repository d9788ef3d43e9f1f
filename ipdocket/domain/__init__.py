"""Domain layer for ipdocket.

Pure models, events and services. Nothing in this package performs I/O.
"""
