import os

from onlinestats.core.ports.writer import WriterPort

class FileWriter(WriterPort):
    def __init__(self, filename: str, mode: str = "w"):
        """
        File writer adapter.
            :param filename: Path to the file
            :param mode: File mode, default is write-text
        """
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self.file = open(filename, mode)

    def write(self, data: str):
        self.file.write(data)
        self.file.flush()  # ensure it's written immediately

    def close(self):
        self.file.close()
