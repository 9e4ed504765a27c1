"""Domain layer for sieledger application.

Services are imported from their modules (e.g. ``sieledger.domain.sie_import``);
the database layer imports ``sieledger.domain.entities``, so this package
must not import the services itself.
"""
