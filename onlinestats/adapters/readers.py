import os
import sys
from typing import Iterator, TextIO

from onlinestats.core.ports.reader import ReaderPort


def parse_line(line: str, delimiter: str = ",") -> Iterator[float]:
    """Parse one line of delimited numbers. Blank lines and '#' comments yield nothing."""
    line = line.split("#", 1)[0].strip()
    if not line:
        return
    for token in line.split(delimiter):
        token = token.strip()
        if not token:
            continue
        try:
            yield float(token)
        except ValueError:
            raise ValueError(f"Invalid value in input: {token!r}")


class TextStreamReader(ReaderPort):
    def __init__(self, stream: TextIO = sys.stdin, delimiter: str = ","):
        """
        Reader over an already open text stream.
            :param stream: Text stream, stdin by default
            :param delimiter: Separator between values on the same line
        """
        self.stream = stream
        self.delimiter = delimiter

    def values(self) -> Iterator[float]:
        for line in self.stream:
            yield from parse_line(line, self.delimiter)

    def close(self):
        pass


class FileReader(TextStreamReader):
    def __init__(self, filename: str, delimiter: str = ","):
        """
        File reader adapter.
            :param filename: Path to the file
            :param delimiter: Separator between values on the same line
        """
        if not os.path.exists(filename):
            raise FileNotFoundError(f"File {filename} does not exist")
        super().__init__(open(filename, "r"), delimiter)

    def close(self):
        self.stream.close()
