"""Time Tracker package.

Feature modules (rates, breaks, earnings, sessions, history) expose service
and repository layers; Flask controllers stay thin on top of them.
"""
