"""Rooms app package.

This app holds hotels, rooms with their base and channel prices, rate
rules and blocked dates, together with the nightly price resolver and the
rate-rule conflict checker.
"""
