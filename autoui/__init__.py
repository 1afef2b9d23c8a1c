"""AutoUI Tester - automated website exploration and multi-facet page auditing.

The package crawls a site from a seed URL under one or more simulated device
viewports, interacts with every visited page heuristically, and collects
performance, accessibility, security, SEO and network-weight audits.
"""

__version__ = "1.0.0"
