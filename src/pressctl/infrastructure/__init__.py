"""Infrastructure layer: database, templates, and the entity store.

The database package depends only on stdlib and SQLAlchemy. The store
bridges rows to domain models for the service layer.
"""
