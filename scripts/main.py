import logging
import os
import sys

from onlinestats.adapters.readers import FileReader, TextStreamReader
from onlinestats.adapters.writers import FileWriter
from onlinestats.core.config import Config
from onlinestats.core.domain.pipeline.tracker import Tracker
from onlinestats.core.ports.reader import ReaderPort


logging.basicConfig(
    level=logging.ERROR,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def write_snapshot(tracker: Tracker, filename: str):
    writer = FileWriter(filename)
    try:
        writer.write(tracker.snapshot())
    finally:
        writer.close()
    logger.info("Snapshot written to %s", filename)


def main():
    cfg = Config(sys.argv[1] if len(sys.argv) > 1 else "./configs/config.yaml")
    logging.getLogger().setLevel(cfg.log_level)

    snapshot = cfg.snapshot_filename
    if snapshot and os.path.exists(snapshot):
        with open(snapshot, "r") as f:
            tracker = Tracker.from_snapshot(f.read())
    else:
        tracker = Tracker.from_params(cfg.statistics())

    if cfg.input_filename:
        reader: ReaderPort = FileReader(cfg.input_filename, cfg.input_delimiter)
    else:
        reader = TextStreamReader(delimiter=cfg.input_delimiter)

    try:
        tracker.extend(reader.values())
    finally:
        reader.close()

    logger.info("Processed %d values", tracker.count)
    for name, value in tracker.values().items():
        print(f"{name}: {value}")

    if snapshot:
        write_snapshot(tracker, snapshot)


if __name__ == "__main__":
    main()
