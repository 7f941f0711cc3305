"""Utility modules for pycptok.

Small helpers over standard services that batch programs commonly need next
to their I/O, such as radix formatting and content digests.
"""
