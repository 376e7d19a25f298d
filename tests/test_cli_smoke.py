import json

from tests.helpers import clone_scenario, write_scenario
from canretire.__main__ import main


def test_validate_mode_exits_zero(capsys):
    code = main(["sample_scenario.json", "--validate"])
    assert code == 0
    assert "Scenario is valid." in capsys.readouterr().out


def test_invalid_scenario_returns_one(tmp_path, sample_scenario_dict, capsys):
    data = clone_scenario(sample_scenario_dict)
    data["basic_inputs"]["longevity_age"] = 60
    path = write_scenario(tmp_path, data)

    code = main([str(path), "--validate"])
    assert code == 1
    assert "ERROR: basic_inputs.longevity_age" in capsys.readouterr().err


def test_missing_scenario_file_returns_two(tmp_path):
    missing = tmp_path / "nope.json"
    code = main([str(missing), "--validate"])
    assert code == 2


def test_malformed_scenario_returns_two(tmp_path, sample_scenario_dict, capsys):
    data = clone_scenario(sample_scenario_dict)
    del data["assumptions"]
    path = write_scenario(tmp_path, data)

    code = main([str(path)])
    assert code == 2
    assert "Failed to load scenario" in capsys.readouterr().err


def test_summary_mode_prints_table(capsys):
    code = main(["sample_scenario.json", "--summary"])
    out = capsys.readouterr().out

    assert code == 0
    assert "Scenario: Baseline" in out
    assert "RRIF Conversion" in out


def test_json_output_is_written(tmp_path):
    output_path = tmp_path / "results.json"
    code = main(["sample_scenario.json", "--json", str(output_path)])

    assert code == 0
    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert data["scenario_name"] == "Baseline"
    assert data["years"][0]["age"] == 58


def test_variant_flag_runs_variant(capsys):
    code = main(["sample_scenario.json", "--variant", "retire_early", "--years-earlier", "2"])
    assert code == 0
    assert "Retire 2 Years Earlier" in capsys.readouterr().out


def test_unavailable_tax_year_returns_two(capsys):
    code = main(["sample_scenario.json", "--tax-year", "1999"])
    assert code == 2
    assert "Tax data unavailable" in capsys.readouterr().err


def test_optimize_flag_reports_spending(capsys):
    code = main(["sample_scenario.json", "--optimize"])
    assert code == 0
    assert "Optimized spending:" in capsys.readouterr().out
