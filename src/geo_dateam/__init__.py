"""Geo DaTeam package.

Feature modules (users, attendance, expenses, locations, reports) each
hold a model, a service and a thin Flask controller. Services depend on
the ``RecordStore`` interface, never on a concrete backend.
"""

__version__ = "1.0.0"
