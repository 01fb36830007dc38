import os
import sys
import datetime
import threading
import json

from aurfetch.modules.config import config as _default_config

DEFAULT_LOG_FILE = os.path.expanduser("~/.cache/aurfetch/aurfetch.log")

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "SUCCESS": 25,
    "WARNING": 30,
    "ERROR": 40,
}

COLORS = {
    "DEBUG": "\033[90m",
    "INFO": "\033[94m",
    "SUCCESS": "\033[92m",
    "WARNING": "\033[93m",
    "ERROR": "\033[91m",
}
RESET = "\033[0m"


class Logger:
    """Line logger writing to stderr and, optionally, a size-rotated file."""

    def __init__(self, name="aurfetch", cfg=None):
        cfg = cfg or _default_config
        self.name = name
        self.log_file = cfg.get("logging", "log_file", fallback=DEFAULT_LOG_FILE)
        self.to_file = cfg.getboolean("logging", "log_to_file", fallback=False)
        self.to_console = cfg.getboolean("logging", "log_to_console", fallback=True)
        self.color = cfg.getboolean("logging", "color_output", fallback=cfg.color)
        self.utc = cfg.getboolean("logging", "timestamp_utc", fallback=False)
        self.as_json = cfg.get("logging", "log_format", fallback="text").lower() == "json"
        self.max_bytes = cfg.getint("logging", "max_log_size_kb", fallback=0) * 1024

        self.threshold = LEVELS.get(cfg.get("logging", "level", fallback="info").upper(), LEVELS["INFO"])
        # -v -v on the command line asks for debug tracing
        if cfg.verbose >= 2:
            self.threshold = LEVELS["DEBUG"]

        if self.to_file:
            dirpath = os.path.dirname(self.log_file)
            try:
                os.makedirs(dirpath, exist_ok=True)
            except OSError as e:
                print(f"Logger: could not create log directory {dirpath}: {e}", file=sys.stderr)
                self.to_file = False

        self._lock = threading.Lock()

    def _timestamp(self):
        now = datetime.datetime.now(datetime.timezone.utc) if self.utc else datetime.datetime.now()
        return now.strftime("%Y-%m-%d %H:%M:%S")

    def _render(self, level, message):
        stamp = self._timestamp()
        if self.as_json:
            return json.dumps({"timestamp": stamp, "logger": self.name, "level": level, "message": message})
        return f"[{stamp}] [{self.name}] [{level}] {message}"

    def _append(self, line):
        path = self.log_file
        try:
            if self.max_bytes and os.path.exists(path) and os.path.getsize(path) > self.max_bytes:
                os.replace(path, path + ".1")
            with open(path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            print(f"Logger: could not write log file {path}: {e}", file=sys.stderr)

    def log(self, level, message):
        level = level.upper()
        if LEVELS.get(level, 0) < self.threshold:
            return
        line = self._render(level, message)
        with self._lock:
            if self.to_console:
                if self.color and not self.as_json:
                    print(f"{COLORS.get(level, '')}{line}{RESET}", file=sys.stderr)
                else:
                    print(line, file=sys.stderr)
            if self.to_file:
                self._append(line)

    def debug(self, message):
        self.log("DEBUG", message)

    def info(self, message):
        self.log("INFO", message)

    def success(self, message):
        self.log("SUCCESS", message)

    def warning(self, message):
        self.log("WARNING", message)

    def error(self, message):
        self.log("ERROR", message)
