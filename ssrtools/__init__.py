"""Building blocks for a proxy server: JSON parsing, a list container, host rules, socket addresses and DNS resolution."""

__version__ = "0.1.0"

__all__ = ["jsonvalue", "jsonparser", "obfsutil", "linkedlist", "rule", "netutils", "resolv"]