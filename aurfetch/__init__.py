__version__ = "0.1.0"


class AurfetchError(Exception):
    pass
