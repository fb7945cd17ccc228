"""
ARP Discovery

A Python module for finding live hosts on the local network with ARP
requests, with hostname and vendor enrichment and JSON/YAML/CSV export.
"""

__version__ = "1.0.0"
