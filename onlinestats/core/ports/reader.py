from abc import ABC, abstractmethod
from typing import Iterator


class ReaderPort(ABC):
    @abstractmethod
    def values(self) -> Iterator[float]:
        """yield parsed values in stream order"""
        pass

    @abstractmethod
    def close(self):
        """close reader."""
        pass
