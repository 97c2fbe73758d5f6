"""
Recap - Performance summaries from completed work.

A desktop application that collects completed Linear issues and personal
markdown notes for a period and asks Google Gemini for a performance
review summary.
"""

__version__ = "1.0.0"
