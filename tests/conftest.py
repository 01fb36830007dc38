import io
import tarfile

import pytest

from aurfetch.modules.config import AurfetchConfig


@pytest.fixture
def cfg(tmp_path):
    """Config that reads nothing from the host system."""
    return AurfetchConfig(locations=[str(tmp_path / "no-such.conf")])


def add_file(tar, name, content):
    data = content.encode("utf-8")
    info = tarfile.TarInfo(name=name)
    info.size = len(data)
    tar.addfile(info, io.BytesIO(data))


def make_tar_gz(files):
    """Build an in-memory .tar.gz from {member name: text}."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in files.items():
            add_file(tar, name, content)
    return buf.getvalue()


def desc(name, version="1.0-1"):
    return f"%NAME%\n{name}\n\n%VERSION%\n{version}\n\n"
