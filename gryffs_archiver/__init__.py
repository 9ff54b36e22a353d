"""
Gryffs Archiver - saves a user's gryffs from gryffs.com for offline keeping.

This package logs in through an operator-driven browser session, lists the
user's gryffs, extracts each gryff's details, downloads its images and
writes a self-contained directory with an ``info.json`` manifest.
"""

__version__ = "1.0.0"
__author__ = "Gryffs Archiver Team"
