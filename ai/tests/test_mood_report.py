import json

import mood_report


def _rows():
    return [
        {"id": "a", "createdAt": "2026-03-09T11:00:00Z", "tags": ["mood:Glücklich"]},
        {"id": "b", "createdAt": "2026-03-10T11:00:00Z", "kind": "reflection", "tags": ["moodScore:1"]},
        {"id": "c", "text": "ohne Datum"},
    ]


class TestMoodReport:
    def test_json_array(self, tmp_path, capsys):
        src = tmp_path / "journal.json"
        src.write_text(json.dumps(_rows(), ensure_ascii=False), encoding="utf-8")

        rc = mood_report.main(["--src", str(src), "--days", "3650", "--tz", "Europe/Berlin"])
        out, err = capsys.readouterr()
        assert rc == 0
        report = json.loads(out)
        assert report["entries"] == 2
        assert report["skipped"] == 1
        assert report["reflections"] == 1
        assert report["mood_sources"] == {"MoodLabelTag": 1, "MoodScoreTag": 1}
        assert report["active_days"] == 2
        assert "[skip] 3:" in err

    def test_jsonl_with_broken_line(self, tmp_path, capsys):
        src = tmp_path / "journal.jsonl"
        lines = [json.dumps(r, ensure_ascii=False) for r in _rows()[:2]] + ["{broken"]
        src.write_text("\n".join(lines) + "\n", encoding="utf-8")

        rc = mood_report.main(["--src", str(src), "--days", "3650"])
        out, err = capsys.readouterr()
        assert rc == 0
        assert json.loads(out)["skipped"] == 1
        assert "[skip] 3: not valid JSON" in err

    def test_non_finite_score(self, tmp_path, capsys):
        src = tmp_path / "journal.jsonl"
        src.write_text(
            '{"createdAt":"2026-03-10T10:00:00Z","moodScore":Infinity}\n'
            '{"createdAt":"2026-03-10T11:00:00Z","moodScore":NaN,"mood":"Traurig"}\n',
            encoding="utf-8",
        )

        rc = mood_report.main(["--src", str(src), "--days", "3650"])
        report = json.loads(capsys.readouterr().out)
        assert rc == 0
        assert report["entries"] == 2
        assert report["skipped"] == 0
        assert report["mood_sources"] == {"none": 1, "MoodLabelTag": 1}

    def test_missing_file(self, tmp_path, capsys):
        rc = mood_report.main(["--src", str(tmp_path / "nope.json")])
        assert rc == 1
        assert "not found" in capsys.readouterr().err
