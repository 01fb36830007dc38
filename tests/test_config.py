import os

from aurfetch.modules.config import AurfetchConfig
from aurfetch.modules.logger import Logger


def write_conf(path, text):
    path.write_text(text)
    return str(path)


def test_first_existing_file_wins(tmp_path):
    first = write_conf(tmp_path / "a.conf", "[options]\nverbose = 2\n")
    second = write_conf(tmp_path / "b.conf", "[options]\nverbose = 1\n")
    cfg = AurfetchConfig([str(tmp_path / "missing.conf"), first, second])
    assert cfg.loaded_from == first
    assert cfg.verbose == 2


def test_defaults_without_file(cfg):
    assert cfg.loaded_from is None
    assert cfg.verbose == 0
    assert cfg.quiet is False
    assert cfg.color is True
    assert cfg.download_dir is None
    assert cfg.working_dir() == os.getcwd()
    assert "options" not in cfg


def test_typed_getters_fall_back_on_bad_values(tmp_path):
    conf = write_conf(tmp_path / "a.conf", "[options]\nverbose = lots\ncolor = maybe\n[aur]\ntimeout = soon\n")
    cfg = AurfetchConfig([conf])
    assert cfg.verbose == 0
    assert cfg.color is True
    assert cfg.getint("aur", "timeout", fallback=30) == 30
    assert "aur" in cfg


def test_set_overrides_and_working_dir(cfg, tmp_path):
    cfg.set("options", "download_dir", str(tmp_path))
    cfg.set("options", "quiet", True)
    assert cfg.working_dir() == os.path.realpath(str(tmp_path))
    assert cfg.quiet is True


def test_logger_levels(cfg, capsys):
    log = Logger("test", cfg)
    log.debug("hidden")
    log.info("shown")
    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "[test] [INFO] shown" in err

    cfg.set("options", "verbose", 2)
    Logger("test", cfg).debug("now visible")
    assert "now visible" in capsys.readouterr().err


def test_logger_json_to_file(cfg, tmp_path):
    log_file = tmp_path / "logs" / "aurfetch.log"
    cfg.set("logging", "log_to_file", "true")
    cfg.set("logging", "log_to_console", "false")
    cfg.set("logging", "log_format", "json")
    cfg.set("logging", "log_file", str(log_file))
    Logger("test", cfg).warning("careful")
    line = log_file.read_text().strip()
    assert '"level": "WARNING"' in line
    assert '"message": "careful"' in line


def test_logger_rotates_large_file(cfg, tmp_path):
    log_file = tmp_path / "aurfetch.log"
    log_file.write_text("x" * 2048)
    cfg.set("logging", "log_to_file", "true")
    cfg.set("logging", "log_to_console", "false")
    cfg.set("logging", "max_log_size_kb", "1")
    cfg.set("logging", "log_file", str(log_file))
    Logger("test", cfg).error("fresh")
    assert (tmp_path / "aurfetch.log.1").read_text() == "x" * 2048
    assert "fresh" in log_file.read_text()
