# aurfetch/modules/pacman.py
"""
pacman.py - read-only access to pacman's package databases.

- Parses pacman.conf: [options] gives RootDir/DBPath, every other section
  is a sync repository (kept in file order).
- Local database: <dbpath>/local/<pkg>-<ver>/desc
- Sync databases: <dbpath>/sync/<repo>.db (tar archives of <pkg>-<ver>/desc)
- PackageDatabase is an explicit handle: open() once, pass it around,
  close() once. It can be used as a context manager.
"""

from __future__ import annotations
import configparser
import os
import tarfile
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from aurfetch import AurfetchError
from aurfetch.modules import logger as _logger
from aurfetch.modules.config import DEFAULT_PACMAN_CONF
from aurfetch.modules.deplist import DepList

DEFAULT_ROOT = "/"
DEFAULT_DBPATH = "/var/lib/pacman"


class PacmanError(AurfetchError):
    pass


@dataclass
class PacmanConf:
    root: str = DEFAULT_ROOT
    dbpath: str = DEFAULT_DBPATH
    repos: List[str] = field(default_factory=list)


def parse_pacman_conf(path: str = DEFAULT_PACMAN_CONF,
                      log: Optional[_logger.Logger] = None) -> PacmanConf:
    log = log or _logger.Logger("pacman")
    conf = PacmanConf()
    parser = configparser.ConfigParser(
        allow_no_value=True,
        strict=False,
        interpolation=None,
        delimiters=("=",),
        inline_comment_prefixes=("#",),
    )
    parser.optionxform = str

    try:
        found = parser.read(path)
    except configparser.Error as e:
        raise PacmanError(f"Could not parse {path}: {e}") from e
    if not found:
        log.warning(f"Could not locate pacman config {path}")
        return conf

    for section in parser.sections():
        if section == "options":
            opts = parser[section]
            if opts.get("RootDir"):
                conf.root = opts["RootDir"].strip()
            if opts.get("DBPath"):
                conf.dbpath = opts["DBPath"].strip()
        else:
            conf.repos.append(section)
    log.debug(f"pacman.conf {path}: dbpath={conf.dbpath} repos={conf.repos}")
    return conf


def parse_desc(content: str) -> Dict[str, List[str]]:
    """Parse a desc file (%FIELD% header followed by value lines)."""
    fields: Dict[str, List[str]] = {}
    current = None
    for line in content.splitlines():
        line = line.strip()
        if line.startswith("%") and line.endswith("%") and len(line) > 2:
            current = line[1:-1]
            fields[current] = []
        elif line and current:
            fields[current].append(line)
        else:
            current = None
    return fields


class PackageDatabase:
    def __init__(self,
                 conf_path: str = DEFAULT_PACMAN_CONF,
                 dbpath: Optional[str] = None,
                 repos: Optional[List[str]] = None,
                 logger: Optional[_logger.Logger] = None):
        """
        conf_path: pacman.conf to read repositories and DBPath from
        dbpath / repos: explicit values that win over pacman.conf
        """
        self.conf_path = conf_path
        self.log = logger or _logger.Logger("pacman")
        self._dbpath_override = dbpath
        self._repos_override = repos
        self.dbpath = dbpath or DEFAULT_DBPATH
        self.repos: List[str] = list(repos or [])
        self._local: Optional[Set[str]] = None
        self._sync: Dict[str, Set[str]] = {}
        self._opened = False

    # -------------------------
    # lifecycle
    # -------------------------
    def open(self) -> "PackageDatabase":
        if self._opened:
            raise PacmanError("package database is already open")
        self.log.debug("Initializing package database")
        if self._dbpath_override is None or self._repos_override is None:
            conf = parse_pacman_conf(self.conf_path, log=self.log)
            if self._dbpath_override is None:
                self.dbpath = conf.dbpath
            if self._repos_override is None:
                self.repos = conf.repos
        self._local = self._load_local()
        self._sync = {}
        self._opened = True
        return self

    def close(self) -> None:
        if not self._opened:
            raise PacmanError("package database is not open")
        self._local = None
        self._sync = {}
        self._opened = False

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _require_open(self):
        if not self._opened:
            raise PacmanError("package database is not open")

    # -------------------------
    # loading
    # -------------------------
    def _load_local(self) -> Set[str]:
        names: Set[str] = set()
        local_dir = os.path.join(self.dbpath, "local")
        if not os.path.isdir(local_dir):
            self.log.warning(f"Local database not found: {local_dir}")
            return names
        for entry in os.scandir(local_dir):
            if not entry.is_dir():
                continue
            desc = os.path.join(entry.path, "desc")
            try:
                with open(desc, "r", encoding="utf-8", errors="replace") as fh:
                    fields = parse_desc(fh.read())
            except OSError as e:
                self.log.warning(f"Skipping unreadable entry {desc}: {e}")
                continue
            name = fields.get("NAME")
            if name:
                names.add(name[0])
        self.log.debug(f"{len(names)} packages in local database")
        return names

    def _load_sync(self, repo: str) -> Set[str]:
        if repo in self._sync:
            return self._sync[repo]
        names: Set[str] = set()
        path = os.path.join(self.dbpath, "sync", f"{repo}.db")
        if not os.path.isfile(path):
            self.log.warning(f"Sync database for '{repo}' not found: {path}")
        else:
            try:
                with tarfile.open(path, "r:*") as tar:
                    for member in tar:
                        if not member.isfile() or not member.name.endswith("/desc"):
                            continue
                        fh = tar.extractfile(member)
                        if fh is None:
                            continue
                        fields = parse_desc(fh.read().decode("utf-8", errors="replace"))
                        name = fields.get("NAME")
                        if name:
                            names.add(name[0])
            except (tarfile.TarError, OSError) as e:
                self.log.warning(f"Could not read sync database {path}: {e}")
        self._sync[repo] = names
        return names

    # -------------------------
    # queries
    # -------------------------
    def local_package_exists(self, name: str) -> bool:
        self._require_open()
        return name in self._local

    def find_repository(self, name: str) -> Optional[str]:
        """First sync repository (pacman.conf order) that carries ``name``."""
        self._require_open()
        for repo in self.repos:
            if name in self._load_sync(repo):
                return repo
        return None

    def official_repository_exists(self, name: str) -> bool:
        return self.find_repository(name) is not None

    def installed_packages(self) -> List[str]:
        self._require_open()
        return sorted(self._local)

    def query_foreign(self) -> DepList:
        """Installed packages that no sync repository provides, sorted by name."""
        foreign = DepList()
        for name in self.installed_packages():
            if self.find_repository(name) is None:
                foreign.append(name)
        return foreign
