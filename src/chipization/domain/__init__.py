"""Domain layer for the Chipization tracker.

Contains pure ordering and adjacency rules for visited-location histories.
This layer has no dependencies on infrastructure concerns.
"""
