"""
Focus Flow - Active Pause Reminder
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Tray app that spreads short "active pause" sessions across your workday,
picks a guided exercise for each one, and keeps a weekly summary of what
you actually did.

Features:
  - Evenly spaced sessions (6, 8 or 12) inside a configurable work window
  - Quiet hours for reminders
  - Smart exercise pick: favours the body zones you worked least this week
    and avoids the ones you just did
  - Extra exercise pack and your own custom exercises
  - Weekly summary, JSON/CSV export, JSON import

Usage:
    python -m focus_flow            (tray app)
    python -m focus_flow --test     (short intervals for testing)
    python -m focus_flow summary
"""

__version__ = "1.1.0"
