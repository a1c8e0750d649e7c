"""Pipeline orchestration layer.

Verbs that move external data into the PLUMES database:
- `pipeline/load.py` - load spreadsheet (CSV) exports into a table

Import policy:
- CLI imports only from `pipeline.*` for orchestration (verbs).
- `pipeline.*` calls `database.*` for every read and write.
"""
