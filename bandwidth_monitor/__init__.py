"""
Bandwidth Monitor - Real-time Network Bandwidth Dashboard

Polls per-interface network counters and turns them into a continuously
updating download/upload bandwidth stream with rolling history, shown in
a terminal dashboard.
"""

__version__ = "1.0.0"
__author__ = "Network Team"
