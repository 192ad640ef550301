"""HR Portal package.

Feature modules (employees, leave, attendance, users) each carry a model,
a repository interface with its MySQL implementation, a service and a thin
JSON controller. Wiring happens in ``container.py``.
"""
