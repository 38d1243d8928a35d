"""
Transaction subsystem.

Components:
- transaction_models.py: data structures (WorkItem, Options, snapshots, execution slot)
- transaction_queue.py: FIFO of pending work items with eviction/removal events
- transaction_dispatcher.py: serialized executor with a timeout sweep
- transaction_api.py: factory and ready-made transaction payloads
- event_log.py: logs dispatcher events
"""
