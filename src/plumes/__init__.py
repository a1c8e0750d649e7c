"""
plumes core package.

Generic table-access helpers for the PLUMES contaminant database:
- Schema introspection, field validation and row location (`plumes.database`)
- Insert / bulk insert / update / delete over any table
- Full-table dumps and the joined measurement view
- A small Typer-based CLI (`plumes.cli`) for bootstrap and CSV imports

Configuration:
- Shared filesystem anchors (database location, packaged SQL) live in
  `plumes.global_config`.
"""
