# aurfetch/modules/aur.py
"""
aur.py - AUR RPC queries and snapshot download.

- info(name) asks the RPC interface (v5) for a package by exact name.
- A package that is unknown, or a query that fails, gives an empty list:
  absence from the AUR is never treated as an error.
- fetch_tarball(pkg) downloads the snapshot archive and unpacks it into
  the download directory.
"""

from __future__ import annotations
import json
import os
import shutil
import tarfile
import tempfile
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from aurfetch import AurfetchError, __version__
from aurfetch.modules import logger as _logger
from aurfetch.modules.config import DEFAULT_RPC_URL
from aurfetch.modules.deplist import DepList, insert_unique

RPC_VERSION = 5
USER_AGENT = f"aurfetch/{__version__}"


def _unique(names) -> DepList:
    deps = DepList()
    for name in names or ():
        deps = insert_unique(deps, name)
    return deps


class AurError(AurfetchError):
    pass


@dataclass
class AurPackage:
    name: str
    version: str = ""
    description: str = ""
    url_path: str = ""
    package_base: str = ""
    depends: DepList = field(default_factory=DepList)
    makedepends: DepList = field(default_factory=DepList)
    optdepends: DepList = field(default_factory=DepList)

    @classmethod
    def from_rpc(cls, result: Dict[str, Any]) -> "AurPackage":
        return cls(
            name=result.get("Name", ""),
            version=result.get("Version") or "",
            description=result.get("Description") or "",
            url_path=result.get("URLPath") or "",
            package_base=result.get("PackageBase") or "",
            depends=_unique(result.get("Depends")),
            makedepends=_unique(result.get("MakeDepends")),
            optdepends=_unique(result.get("OptDepends")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "depends": self.depends.to_list(),
            "makedepends": self.makedepends.to_list(),
            "optdepends": self.optdepends.to_list(),
        }


class AurClient:
    def __init__(self,
                 rpc_url: str = DEFAULT_RPC_URL,
                 download_dir: Optional[str] = None,
                 timeout: int = 30,
                 logger: Optional[_logger.Logger] = None):
        self.rpc_url = rpc_url
        self.download_dir = download_dir
        self.timeout = timeout
        self.log = logger or _logger.Logger("aur")
        parts = urllib.parse.urlsplit(rpc_url)
        self.base_url = f"{parts.scheme}://{parts.netloc}"

    @classmethod
    def from_config(cls, cfg, logger=None) -> "AurClient":
        return cls(
            rpc_url=cfg.get("aur", "rpc_url", fallback=DEFAULT_RPC_URL),
            download_dir=cfg.working_dir(),
            timeout=cfg.getint("aur", "timeout", fallback=30),
            logger=logger,
        )

    # ------------------------
    # RPC
    # ------------------------
    def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.rpc_url}?{urllib.parse.urlencode(params, doseq=True)}"
        self.log.debug(f"AUR request: {url}")
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            return json.load(resp)

    def info(self, name: str) -> List[AurPackage]:
        params = {"v": RPC_VERSION, "type": "info", "arg[]": [name]}
        try:
            data = self._request(params)
        except (urllib.error.URLError, OSError, ValueError) as e:
            self.log.error(f"AUR query for {name} failed: {e}")
            return []
        if data.get("type") == "error":
            self.log.error(f"AUR query for {name} failed: {data.get('error')}")
            return []
        return [AurPackage.from_rpc(r) for r in data.get("results") or []]

    # ------------------------
    # download
    # ------------------------
    def _safe_members(self, tar: tarfile.TarFile, dest: str):
        root = os.path.realpath(dest)
        for member in tar.getmembers():
            target = os.path.realpath(os.path.join(root, member.name))
            if target != root and not target.startswith(root + os.sep):
                raise AurError(f"Archive member escapes download directory: {member.name}")
            if member.issym() or member.islnk():
                link = os.path.realpath(os.path.join(os.path.dirname(target), member.linkname))
                if not link.startswith(root + os.sep):
                    raise AurError(f"Archive link escapes download directory: {member.name}")
            yield member

    def fetch_tarball(self, pkg: AurPackage, dest: Optional[str] = None) -> str:
        """Download and unpack the snapshot of ``pkg``; returns the unpacked directory."""
        if not pkg.url_path:
            raise AurError(f"No download path known for {pkg.name}")
        dest = os.path.abspath(dest or self.download_dir or os.getcwd())
        url = self.base_url + pkg.url_path
        self.log.info(f"Downloading {pkg.name} from {url} ...")

        archive = None
        try:
            os.makedirs(dest, exist_ok=True)
            fd, archive = tempfile.mkstemp(suffix=".tar.gz", dir=dest)
            os.close(fd)
            req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
            with urllib.request.urlopen(req, timeout=self.timeout) as resp, open(archive, "wb") as out:
                shutil.copyfileobj(resp, out)
            with tarfile.open(archive, "r:*") as tar:
                tar.extractall(dest, members=list(self._safe_members(tar, dest)))
        except (urllib.error.URLError, OSError, tarfile.TarError) as e:
            raise AurError(f"Could not fetch {pkg.name}: {e}") from e
        finally:
            if archive and os.path.exists(archive):
                os.remove(archive)

        target = os.path.join(dest, pkg.package_base or pkg.name)
        self.log.success(f"{pkg.name} downloaded to {target}")
        return target
