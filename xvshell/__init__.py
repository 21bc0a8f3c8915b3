"""A teaching-kernel toolkit: syscall tracing, paging, ELF headers, shell parsing and user utilities."""

__version__ = "0.1.0"