"""
CTFd announcer.

Polls a CTFd instance and posts first bloods, solves and top-N overtakes
to a Discord webhook.
"""

__version__ = "0.1.0"
