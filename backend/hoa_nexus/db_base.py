"""
SQLAlchemy declarative bases for all models.

Two bases, because tables live in two kinds of database:
- TenantBase: tables present in every organization's tenant database
- MasterBase: tables in the shared master database only

This module must not import from models or services to avoid circular
dependencies.
"""

from sqlalchemy.orm import declarative_base

TenantBase = declarative_base()

MasterBase = declarative_base()
