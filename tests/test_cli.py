import json

from weekly_timetable_export.cli import main


def test_export_json(tmp_path, sample_page, capsys):
    html_path = tmp_path / "plan.html"
    html_path.write_text(sample_page, encoding="utf-8")

    rc = main([str(html_path), "-o", str(tmp_path / "out"), "-f", "json"])

    assert rc == 0
    data = json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))
    assert data["events"][0]["title"] == "Algorithms & Data Structures"
    assert "Exported 1 event(s)" in capsys.readouterr().out


def test_default_ics(tmp_path, sample_page):
    html_path = tmp_path / "plan.html"
    html_path.write_text(sample_page, encoding="utf-8")

    assert main([str(html_path), "-o", str(tmp_path / "plan_out")]) == 0
    assert "BEGIN:VEVENT" in (tmp_path / "plan_out.ics").read_text(encoding="utf-8")


def test_list(tmp_path, sample_page, capsys):
    html_path = tmp_path / "plan.html"
    html_path.write_text(sample_page, encoding="utf-8")

    assert main([str(html_path), "--list"]) == 0
    out = capsys.readouterr().out
    assert "2020-02-03 09:00-10:30 Algorithms & Data Structures @ Room 101" in out


def test_stdin(tmp_path, sample_page, monkeypatch, capsys):
    import io

    monkeypatch.setattr("sys.stdin", io.StringIO(sample_page))
    assert main(["-", "--list"]) == 0
    assert "Algorithms & Data Structures" in capsys.readouterr().out


def test_bad_page(tmp_path, capsys):
    html_path = tmp_path / "bad.html"
    html_path.write_text("<html><body><p>Nothing here</p></body></html>", encoding="utf-8")

    assert main([str(html_path)]) == 1
    assert "Error parsing timetable HTML" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.html")]) == 1
    assert "Error" in capsys.readouterr().err
