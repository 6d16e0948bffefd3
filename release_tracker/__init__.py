"""
GitHub Release Tracker Application

A FastAPI-based application that periodically checks tracked GitHub
repositories for their latest release and the commits not released yet.
"""

__version__ = "1.0.0"
__author__ = "GitHub Monitor Team"
