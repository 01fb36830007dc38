import configparser
import os

DEFAULT_LOCATIONS = [
    "/etc/aurfetch/aurfetch.conf",
    os.path.expanduser("~/.config/aurfetch/aurfetch.conf"),
]

DEFAULT_PACMAN_CONF = "/etc/pacman.conf"
DEFAULT_RPC_URL = "https://aur.archlinux.org/rpc/"


class AurfetchConfig:
    def __init__(self, locations=None):
        self.locations = locations or DEFAULT_LOCATIONS
        self.config = configparser.ConfigParser(interpolation=None)
        self.loaded_from = None
        self.reload()

    def reload(self):
        """(Re)load settings from the first existing file; none found is fine."""
        self.config = configparser.ConfigParser(interpolation=None)
        self.loaded_from = None
        for path in self.locations:
            if os.path.isfile(path):
                self.config.read(path)
                self.loaded_from = path
                return

    def get(self, section, option, fallback=None):
        try:
            return self.config.get(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def getboolean(self, section, option, fallback=False):
        try:
            return self.config.getboolean(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def getint(self, section, option, fallback=0):
        try:
            return self.config.getint(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def set(self, section, option, value):
        """Override a value in memory (used for command line flags)."""
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, option, str(value))

    # shortcuts for the [options] section
    @property
    def download_dir(self):
        return self.get("options", "download_dir") or None

    @property
    def verbose(self):
        return self.getint("options", "verbose", fallback=0)

    @property
    def quiet(self):
        return self.getboolean("options", "quiet", fallback=False)

    @property
    def color(self):
        return self.getboolean("options", "color", fallback=True)

    def working_dir(self):
        """Configured download directory, else the current directory."""
        if self.download_dir:
            return os.path.realpath(os.path.expanduser(self.download_dir))
        return os.getcwd()

    def __contains__(self, section):
        return section in self.config


# Default instance for modules that are not handed one explicitly
config = AurfetchConfig()
