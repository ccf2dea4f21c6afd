"""
Deadline reminder subsystem.

Components:
- models.py: data structures (Task, Project, User, DerivedAlert, EngineState, FeedItem)
- scanner.py: overdue / upcoming detection (pure)
- gate.py: sent-log dedup, daily email quota, retention pruning
- notifier.py: message composition + concurrent channel sends
- feed.py: merged, dismissal-filtered notification feed and badge count
- engine.py: ReminderEngine, the single owner of persisted reminder state
- scheduler.py: polling loop that runs the scan cycle
"""
