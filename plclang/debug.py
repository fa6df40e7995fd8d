from typing import Optional, TextIO


class DebugLog:
    """Debug trace written to a file when the verbosity level is above zero.

    Messages carry a level; a message is written only when its level is at
    most the configured verbosity. Level 0 disables the log and no file is
    opened.
    """
    def __init__(self, level: int = 0, path: str = 'debug.txt'):
        self.level = level
        self.path = path
        self.fp: Optional[TextIO] = open(path, 'w', encoding='utf-8') if level > 0 else None

    def log(self, level: int, msg: str):
        if self.fp is not None and level <= self.level:
            self.fp.write(msg + '\n')
            self.fp.flush()

    def close(self):
        if self.fp is not None:
            self.fp.close()
            self.fp = None
