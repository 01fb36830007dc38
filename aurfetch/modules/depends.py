# aurfetch/modules/depends.py
"""
depends.py - fetch the AUR dependencies of a downloaded package.

For every build/runtime dependency named in <dir>/<pkg>/PKGBUILD:
  1. installed locally          -> nothing to do
  2. in an official repository  -> nothing to do (pacman will install it)
  3. in the AUR                 -> download its snapshot
Dependencies found nowhere are skipped silently (they may be provided
by another package). Dependencies of the fetched packages are not
followed; call resolve_and_fetch() again for each of them.
"""

import os
from typing import Optional

from aurfetch.modules import logger as _logger
from aurfetch.modules.config import config as _default_config
from aurfetch.modules.pkgbuild import extract_flat_dependencies, read_pkgbuild


class DependencyResolver:
    def __init__(self, db, aur, cfg=None, logger: Optional[_logger.Logger] = None):
        """
        db: opened PackageDatabase (local_package_exists / find_repository)
        aur: AurClient (info / fetch_tarball)
        """
        self.db = db
        self.aur = aur
        self.cfg = cfg or _default_config
        self.log = logger or _logger.Logger("depends", self.cfg)

    def pkgbuild_path(self, package: str) -> str:
        return os.path.join(self.cfg.working_dir(), package, "PKGBUILD")

    def _in_official_repo(self, name: str) -> bool:
        repo = self.db.find_repository(name)
        if repo:
            self.log.info(f"{name} is available in {repo}")
            return True
        return False

    def resolve_and_fetch(self, package: str) -> int:
        """
        Fetch the AUR-only dependencies of ``package``.
        Returns how many dependencies were fetched from the AUR.
        Raises RecipeNotFound / MalformedRecipe for this package only.
        """
        text = read_pkgbuild(self.pkgbuild_path(package))
        deps = extract_flat_dependencies(text, log=self.log)
        del text

        if not self.cfg.quiet and self.cfg.verbose >= 1:
            self.log.info(f":: Fetching uninstalled dependencies for {package}...")

        fetched = 0
        for depend in deps:
            self.log.debug(f"Attempting to find {depend}")

            if self.db.local_package_exists(depend):
                self.log.debug(f"{depend} is installed")
                continue

            if self._in_official_repo(depend):
                continue

            results = self.aur.info(depend)
            if not results:
                continue

            self.log.debug(f"{depend} is in the AUR")
            fetched += 1
            self.aur.fetch_tarball(results[0])

        return fetched
