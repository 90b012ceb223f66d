"""Break Tracker package.

Feature modules (accounts, ledger) sit on top of a thin Flask controller layer,
with service and repository layers underneath.
"""
