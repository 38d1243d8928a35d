"""
Core building blocks shared by the queue and the dispatcher.

Components:
- ports.py: Transaction protocol and callback types
- events.py: EventEmitter and event names
- errors.py: TransactionError / ErrorKind
"""
