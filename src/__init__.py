"""
Package marker for source code under `src`.
It groups the catalog API and its shared settings and logging helpers under a stable import path.
"""
