"""
Module ORM Registry (``rental_modules._orm_registry``).

Responsibility
--------------
Ensure every SQLAlchemy ORM model is imported so that ``Base.metadata``
contains its table before tables are created.

Architecture position
---------------------
**Modules layer** -- utility.  Imports ``rental_modules`` and
``rental_services`` ORM modules and ``rental_kernel.db.engine``.
MUST NOT be imported by ``rental_kernel`` or ``rental_services``.

Usage
-----
Entrypoints and ``tests/conftest.py`` call ``create_all_tables()``.
"""


def import_all_orm_models() -> None:
    """Import every ORM module. Idempotent."""
    # fmt: off
    import rental_modules.contracts.orm  # noqa: F401
    import rental_services.orm  # noqa: F401  # booking cheque mirror
    # fmt: on


def create_all_tables() -> None:
    """Create the contract and booking-mirror tables.

    Preconditions:
        Engine must be initialized via ``init_engine_from_url()``.
    """
    from rental_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
