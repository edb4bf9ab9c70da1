"""Service layer.

Import services from their subpackages, e.g.
``from devit.services.identity.service import IdentityService``. Nothing is
re-exported here because the persistence layer imports
:mod:`devit.services._shared.errors` and an eager import of the services
would make that circular.
"""
