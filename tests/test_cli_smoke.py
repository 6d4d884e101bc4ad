from hfp.__main__ import main
from tests.helpers import SAMPLE_PLAN, clone_plan, write_plan


def test_validate_mode_exits_zero(capsys):
    code = main([str(SAMPLE_PLAN), "--validate"])
    assert code == 0
    assert "Plan is valid." in capsys.readouterr().out


def test_invalid_plan_returns_one(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["settings"]["state"] = "TX"
    path = write_plan(tmp_path, data)

    code = main([str(path), "--validate"])
    assert code == 1


def test_missing_plan_file_returns_two(tmp_path):
    missing = tmp_path / "nope.json"
    code = main([str(missing), "--validate"])
    assert code == 2


def test_malformed_entry_returns_two(tmp_path, sample_plan_dict, capsys):
    data = clone_plan(sample_plan_dict)
    data["entries"][0]["start_year"] = 2040
    path = write_plan(tmp_path, data)

    code = main([str(path), "--validate"])
    assert code == 2
    assert "entries[0]: Start year cannot be after end year" in capsys.readouterr().err


def test_summary_mode_writes_output(tmp_path, sample_plan_dict, capsys):
    plan_path = write_plan(tmp_path, sample_plan_dict)
    output_path = tmp_path / "out.csv"
    code = main([str(plan_path), "--summary", "--check", "-o", str(output_path)])

    assert code == 0
    assert output_path.exists()
    text = output_path.read_text(encoding="utf-8")
    assert text.startswith("Item,2026,2027")
    assert "Total Income" in text
    assert "Years: 2026-2055" in capsys.readouterr().out


def test_entries_csv_replaces_plan_entries(tmp_path, sample_plan_dict):
    plan_path = write_plan(tmp_path, sample_plan_dict)
    entries_path = tmp_path / "entries.csv"
    entries_path.write_text(
        "owner,type,description,value,start_year,end_year\n"
        "Alex,income,Salary,50000,2030,2031\n",
        encoding="utf-8",
    )
    output_path = tmp_path / "out.csv"

    code = main([str(plan_path), "--entries", str(entries_path), "--roth-conversions", "-o", str(output_path)])

    assert code == 0
    assert output_path.read_text(encoding="utf-8").startswith("Item,2030,2031\n")
