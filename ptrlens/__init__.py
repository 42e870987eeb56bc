"""
PTRLens - Bulk Reverse DNS Tool

Reads IP addresses from stdin and resolves their PTR records
against a list of resolvers using a pool of concurrent workers.
"""

__version__ = "1.0.0"
__author__ = "PTRLens"
