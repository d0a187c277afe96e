import importlib.util
from pathlib import Path

import pytest

from onlinestats.core.domain.params.stat_params import StatKind, StatParams
from onlinestats.core.domain.pipeline.tracker import Tracker

MAIN_PATH = Path(__file__).resolve().parent.parent / "scripts" / "main.py"


def load_main():
    spec = importlib.util.spec_from_file_location("onlinestats_main", MAIN_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def make_tracker() -> Tracker:
    tracker = Tracker.from_params([
        StatParams("median", StatKind.QUANTILE),
        StatParams("sum2", StatKind.SUM, window=2),
    ])
    tracker.extend([9, 7, 3, 2, 6, 1, 8, 5, 4])
    return tracker


class FailingWriter:
    instances = []

    def __init__(self, filename: str):
        self.closed = False
        FailingWriter.instances.append(self)

    def write(self, data: str):
        raise OSError("disk full")

    def close(self):
        self.closed = True


def test_write_snapshot_resumes(tmp_path):
    main = load_main()
    tracker = make_tracker()
    filename = str(tmp_path / "out" / "snapshot.yaml")

    main.write_snapshot(tracker, filename)

    resumed = Tracker.from_snapshot(Path(filename).read_text())
    assert resumed.values() == tracker.values()


def test_write_snapshot_closes_writer_on_error(tmp_path, monkeypatch):
    main = load_main()
    monkeypatch.setattr(main, "FileWriter", FailingWriter)
    FailingWriter.instances.clear()

    with pytest.raises(OSError):
        main.write_snapshot(make_tracker(), str(tmp_path / "snapshot.yaml"))

    assert len(FailingWriter.instances) == 1
    assert FailingWriter.instances[0].closed
