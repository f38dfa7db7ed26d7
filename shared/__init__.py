"""
Shared Kernel

Base domain classes, value objects and the transaction/event plumbing
shared by the room and booking contexts.
"""
