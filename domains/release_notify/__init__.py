"""
Release Notification Domain

Polls the release FTP drop and mails one summary per build day:
- ledger.py - Sent-files ledger (membership lookup and commit)
- selector.py - New manifest discovery
- grouper.py - Partition by modification day
- aggregator.py - Manifest download and parsing
- notifier.py - Message rendering and dispatch
- watcher.py - Cycle orchestration and the polling loop
"""

__all__ = ["ledger", "selector", "grouper", "aggregator", "notifier", "watcher"]
