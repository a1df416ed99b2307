import argparse
import io
import json
from dataclasses import dataclass

import pytest

from searchctl.ad_commands import (
    add_ad_parser,
    create_detectors,
    delete_detectors,
    get_detectors,
    print_detector,
    start_detectors,
    stop_detectors,
    update_detectors,
)


class FakeHandler:
    def __init__(self, patterns=None, fail_on=None):
        self.calls = []
        self.patterns = patterns or {}
        self.fail_on = fail_on

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_on is not None and self.fail_on in call:
            raise RuntimeError(f"failed {self.fail_on}")

    def create_anomaly_detector(self, name):
        self._record("create", name)

    def delete_anomaly_detector_by_id(self, detector, force):
        self._record("delete-id", detector, force)

    def delete_anomaly_detector_by_name_pattern(self, detector, force):
        self._record("delete-name", detector, force)

    def get_anomaly_detector_by_id(self, detector):
        self._record("get-id", detector)
        return {"id": detector}

    def get_anomaly_detectors_by_name_pattern(self, detector):
        self._record("get-name", detector)
        return self.patterns.get(detector, [])

    def start_anomaly_detector_by_id(self, detector):
        self._record("start-id", detector)

    def start_anomaly_detector_by_name_pattern(self, detector):
        self._record("start-name", detector)

    def stop_anomaly_detector_by_id(self, detector):
        self._record("stop-id", detector)

    def stop_anomaly_detector_by_name_pattern(self, detector):
        self._record("stop-name", detector)

    def update_anomaly_detector(self, name, force, start):
        self._record("update", name, force, start)

    def generate_anomaly_detector(self):
        return b'{"name": "sample"}'


def _parse(argv):
    parser = argparse.ArgumentParser(prog="t")
    add_ad_parser(parser.add_subparsers())
    return parser.parse_args(argv)


def test_create_detectors_in_order():
    handler = FakeHandler()
    create_detectors(handler, ["a.json", "b.json"])
    assert handler.calls == [("create", "a.json"), ("create", "b.json")]


def test_create_detectors_stops_at_first_failure():
    handler = FakeHandler(fail_on="a.json")
    with pytest.raises(RuntimeError, match="failed a.json"):
        create_detectors(handler, ["a.json", "b.json"])
    assert handler.calls == [("create", "a.json")]


@pytest.mark.parametrize(
    "by_id, kind", [(True, "delete-id"), (False, "delete-name")]
)
def test_delete_detectors_chooses_lookup(by_id, kind):
    handler = FakeHandler()
    delete_detectors(handler, ["d1", "d2"], force=True, by_id=by_id)
    assert handler.calls == [(kind, "d1", True), (kind, "d2", True)]


def test_get_detectors_by_pattern_flattens():
    handler = FakeHandler(patterns={"x*": [{"name": "x1"}, {"name": "x2"}], "y": [{"name": "y"}]})
    result = get_detectors(handler, ["x*", "y"])
    assert [d["name"] for d in result] == ["x1", "x2", "y"]


def test_get_detectors_by_id_wraps_each():
    handler = FakeHandler()
    assert get_detectors(handler, ["i1", "i2"], by_id=True) == [{"id": "i1"}, {"id": "i2"}]


def test_get_detectors_empty_when_nothing_matches():
    assert get_detectors(FakeHandler(), ["none"]) == []


def test_print_detector_round_trips_dict():
    out = io.StringIO()
    detector = {"name": "d", "nested": {"k": [1, 2]}}
    print_detector(out, detector)
    text = out.getvalue()
    assert text.endswith("\n")
    assert '\n  "name": "d"' in text
    assert json.loads(text) == detector


def test_print_detector_dataclass():
    @dataclass
    class Detector:
        name: str
        interval: int

    out = io.StringIO()
    print_detector(out, Detector("d", 5))
    assert json.loads(out.getvalue()) == {"name": "d", "interval": 5}


def test_start_and_stop_detectors():
    handler = FakeHandler()
    start_detectors(handler, ["a"], by_id=True)
    start_detectors(handler, ["b"])
    stop_detectors(handler, ["c"], by_id=True)
    stop_detectors(handler, ["d"])
    assert handler.calls == [
        ("start-id", "a"),
        ("start-name", "b"),
        ("stop-id", "c"),
        ("stop-name", "d"),
    ]


def test_update_detectors_passes_flags():
    handler = FakeHandler()
    update_detectors(handler, ["f.json"], force=True, start=False)
    assert handler.calls == [("update", "f.json", True, False)]


def test_parser_delete_flags():
    args = _parse(["ad", "delete", "x", "--id", "-f"])
    assert (args.command_name, args.detectors, args.id, args.force) == ("delete", ["x"], True, True)
    handler = FakeHandler()
    args.run(args, handler)
    assert handler.calls == [("delete-id", "x", True)]


def test_parser_update_flags():
    args = _parse(["ad", "update", "a.json", "-s"])
    handler = FakeHandler()
    args.run(args, handler)
    assert handler.calls == [("update", "a.json", False, True)]


def test_parser_start_requires_detector():
    with pytest.raises(SystemExit) as info:
        _parse(["ad", "start"])
    assert info.value.code == 2


def test_run_get_prints_json(capsys):
    args = _parse(["ad", "get", "p"])
    args.run(args, FakeHandler(patterns={"p": [{"name": "p1"}]}))
    assert json.loads(capsys.readouterr().out) == {"name": "p1"}


def test_run_create_generate_template(capsys):
    args = _parse(["ad", "create", "-g"])
    handler = FakeHandler()
    args.run(args, handler)
    assert json.loads(capsys.readouterr().out) == {"name": "sample"}
    assert handler.calls == []


def test_run_stop_without_detectors_prints_usage(capsys):
    args = _parse(["ad", "stop"])
    handler = FakeHandler()
    args.run(args, handler)
    assert "usage" in capsys.readouterr().out
    assert handler.calls == []


def test_run_create_without_files_prints_usage(capsys):
    args = _parse(["ad", "create"])
    handler = FakeHandler()
    args.run(args, handler)
    assert "usage" in capsys.readouterr().out
    assert handler.calls == []