"""
Infrastructure Layer

Concrete implementations of the stores defined in the domain layer.

Components:
- database/: SQLModel tables, SQL repositories and service wiring
- memory/: Thread-safe in-memory stores for embedding and tests
"""
