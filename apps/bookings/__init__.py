"""Bookings app package.

This app encapsulates the booking domain: the booking model, the
availability check, reference numbers and the atomic create, confirm and
cancel flows. Bookings of one room are serialised on the room row lock so
two overlapping pending or confirmed bookings can never both commit.
"""
