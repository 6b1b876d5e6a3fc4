"""Terminal rendering of build reports.

Modules
-------
renderer
    ``ReportRenderer`` turns a ``BuildReport`` into Rich renderables:
    a summary panel, the artifact table, and the warning list.
"""
