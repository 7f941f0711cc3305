"""Core components for pycptok.

This package contains the byte source and sink adapters, the token reader,
the buffered writer, the parser registry, the I/O context that pairs a reader
with a writer, and the factories that build contexts.
"""
