import json
from datetime import datetime, timedelta, timezone

from scriptgen.utils.io import read_text, write_json, write_text
from scriptgen.utils.time import utc_timestamp


def test_utc_timestamp_normalises_offset():
    moment = datetime(2024, 3, 1, 14, 30, 5, tzinfo=timezone(timedelta(hours=2)))
    assert utc_timestamp(moment) == "20240301-123005"


def test_write_helpers_create_parents(tmp_path):
    target = tmp_path / "nested" / "dir" / "note.txt"
    write_text(target, "héllo")
    assert read_text(target) == "héllo"

    payload_path = tmp_path / "other" / "data.json"
    write_json(payload_path, {"name": "café"})
    raw = payload_path.read_text(encoding="utf-8")
    assert raw.endswith("\n")
    assert "café" in raw
    assert json.loads(raw) == {"name": "café"}
