"""
Scheduled task execution.

- **notice_cleanup_scheduler.py**: Removes link-edit warning notices after a
  delay. Uses a min-heap, supports per-key cancellation and graceful shutdown.
"""
