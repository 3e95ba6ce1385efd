"""Removal of the identifier parameter once a build no longer needs it."""

from __future__ import annotations

import logging

from .identifier import BUILD_ROOT_PARAMETER_KEY
from .jobs.store import StoreLookup
from .models import BuildContext

logger = logging.getLogger(__name__)


class CleanupService:
    """Erases the identifier parameter from a build's own job."""

    def __init__(self, stores: StoreLookup):
        self.stores = stores

    def remove_identifier(self, build: BuildContext) -> bool:
        """
        Remove the identifier parameter from ``build``'s job.

        If other parameters remain they are reinstalled in their original
        order. If none remain the parameter set is deleted rather than left
        empty. Returns False when there was nothing to remove.
        """
        store = self.stores(build.job_name)
        current = store.snapshot()
        if current is None or current.get(BUILD_ROOT_PARAMETER_KEY) is None:
            return False

        remaining = current.without(BUILD_ROOT_PARAMETER_KEY)
        if len(remaining):
            store.replace_all(remaining)
        else:
            store.delete()

        logger.info("Removed %s from %s", BUILD_ROOT_PARAMETER_KEY, build.job_name)
        return True
