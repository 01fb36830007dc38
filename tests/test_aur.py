import io
import json
import os
import urllib.error
from unittest.mock import patch

import pytest

from conftest import make_tar_gz
from aurfetch.modules.aur import AurClient, AurError, AurPackage

INFO_REPLY = {
    "version": 5,
    "type": "multiinfo",
    "resultcount": 1,
    "results": [{
        "Name": "libfoo",
        "PackageBase": "libfoo",
        "Version": "1.0-1",
        "Description": "The foo library",
        "URLPath": "/cgit/aur.git/snapshot/libfoo.tar.gz",
        "Depends": ["glibc", "zlib>=1.2"],
        "MakeDepends": ["cmake"],
    }],
}


def reply(payload):
    return io.BytesIO(json.dumps(payload).encode("utf-8"))


@patch("aurfetch.modules.aur.urllib.request.urlopen")
def test_info_found(mock_urlopen):
    mock_urlopen.return_value = reply(INFO_REPLY)
    results = AurClient().info("libfoo")

    assert len(results) == 1
    pkg = results[0]
    assert pkg.name == "libfoo"
    assert pkg.version == "1.0-1"
    assert pkg.depends.to_list() == ["glibc", "zlib>=1.2"]
    assert pkg.makedepends.to_list() == ["cmake"]
    assert pkg.optdepends.to_list() == []

    request = mock_urlopen.call_args[0][0]
    assert request.full_url.startswith("https://aur.archlinux.org/rpc/?")
    assert "type=info" in request.full_url
    assert "libfoo" in request.full_url


@patch("aurfetch.modules.aur.urllib.request.urlopen")
def test_info_not_found(mock_urlopen):
    mock_urlopen.return_value = reply({"version": 5, "type": "multiinfo", "resultcount": 0, "results": []})
    assert AurClient().info("nothing") == []


@patch("aurfetch.modules.aur.urllib.request.urlopen")
def test_info_error_reply(mock_urlopen):
    mock_urlopen.return_value = reply({"version": 5, "type": "error", "error": "Incorrect request type"})
    assert AurClient().info("x") == []


@patch("aurfetch.modules.aur.urllib.request.urlopen")
def test_info_network_failure(mock_urlopen):
    mock_urlopen.side_effect = urllib.error.URLError("unreachable")
    assert AurClient().info("x") == []


@patch("aurfetch.modules.aur.urllib.request.urlopen")
def test_fetch_tarball_extracts(mock_urlopen, tmp_path):
    mock_urlopen.return_value = io.BytesIO(make_tar_gz({
        "libfoo/PKGBUILD": "pkgname=libfoo\ndepends=('glibc')\n",
        "libfoo/.SRCINFO": "pkgbase = libfoo\n",
    }))
    pkg = AurPackage.from_rpc(INFO_REPLY["results"][0])

    target = AurClient(download_dir=str(tmp_path)).fetch_tarball(pkg)

    assert target == os.path.join(str(tmp_path), "libfoo")
    assert (tmp_path / "libfoo" / "PKGBUILD").is_file()
    assert os.listdir(tmp_path) == ["libfoo"]
    request = mock_urlopen.call_args[0][0]
    assert request.full_url == "https://aur.archlinux.org/cgit/aur.git/snapshot/libfoo.tar.gz"


@patch("aurfetch.modules.aur.urllib.request.urlopen")
def test_fetch_tarball_refuses_escaping_members(mock_urlopen, tmp_path):
    mock_urlopen.return_value = io.BytesIO(make_tar_gz({"../evil": "boom"}))
    dest = tmp_path / "dl"
    with pytest.raises(AurError):
        AurClient(download_dir=str(dest)).fetch_tarball(AurPackage(name="evil", url_path="/evil.tar.gz"))
    assert not (tmp_path / "evil").exists()
    assert os.listdir(dest) == []


@patch("aurfetch.modules.aur.urllib.request.urlopen")
def test_fetch_tarball_download_failure(mock_urlopen, tmp_path):
    mock_urlopen.side_effect = urllib.error.URLError("unreachable")
    with pytest.raises(AurError):
        AurClient(download_dir=str(tmp_path)).fetch_tarball(AurPackage(name="x", url_path="/x.tar.gz"))


def test_fetch_tarball_without_path(tmp_path):
    with pytest.raises(AurError):
        AurClient(download_dir=str(tmp_path)).fetch_tarball(AurPackage(name="x"))


def test_from_config(cfg, tmp_path):
    cfg.set("aur", "rpc_url", "https://aur.example.org/rpc/")
    cfg.set("aur", "timeout", "5")
    cfg.set("options", "download_dir", str(tmp_path))
    client = AurClient.from_config(cfg)
    assert client.base_url == "https://aur.example.org"
    assert client.timeout == 5
    assert client.download_dir == str(tmp_path)


@patch("aurfetch.modules.aur.urllib.request.urlopen")
def test_fetch_tarball_uncreatable_download_dir(mock_urlopen, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    client = AurClient(download_dir=str(blocker / "sub"))
    with pytest.raises(AurError):
        client.fetch_tarball(AurPackage(name="libfoo", url_path="/libfoo.tar.gz"))
    mock_urlopen.assert_not_called()


def test_from_rpc_drops_duplicate_names():
    pkg = AurPackage.from_rpc({
        "Name": "libfoo",
        "Depends": ["glibc", "zlib", "glibc"],
        "MakeDepends": ["cmake", "cmake"],
        "OptDepends": None,
    })
    assert pkg.depends.to_list() == ["glibc", "zlib"]
    assert len(pkg.depends) == 2
    assert pkg.makedepends.to_list() == ["cmake"]
    assert pkg.optdepends.to_list() == []
