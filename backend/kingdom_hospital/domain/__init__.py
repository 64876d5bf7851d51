# Domain layer: plain entities and repository contracts.
# Nothing here depends on Flask or SQLAlchemy.
