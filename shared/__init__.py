"""
Shared kernel

Domain building blocks (events, value objects, date arithmetic) and the
application plumbing (message bus, unit of work) used by the listing,
availability and booking apps.
"""
