import json

import pytest

from cli.main import main


def test_cli_xor_run_and_inspect(tmp_path, capsys):
    model = tmp_path / "xor.nn"
    main(["xor", str(model)])
    written = json.loads(capsys.readouterr().out)
    assert model.exists()
    assert written["outputs"]["1,0"] > 0.9

    main(["run", str(model), "--input", "1,0", "--input", "1,1"])
    outputs = json.loads(capsys.readouterr().out)["outputs"]
    assert outputs[0][0] > 0.9
    assert outputs[1][0] < 0.1

    summary_path = tmp_path / "summary.json"
    main(["inspect", str(model), "--out", str(summary_path)])
    summary = json.loads(capsys.readouterr().out)
    assert summary["layers"]["dense"][1]["name"] == "Dense-2"
    assert json.loads(summary_path.read_text()) == summary


def test_cli_reports_bad_models(tmp_path):
    with pytest.raises(SystemExit):
        main(["run", str(tmp_path / "missing.nn"), "--input", "1,0"])

    broken = tmp_path / "broken.nn"
    broken.write_bytes(b"\x02\x00")
    with pytest.raises(SystemExit):
        main(["inspect", str(broken)])


def test_cli_rejects_wrong_input_length(tmp_path, capsys):
    model = tmp_path / "xor.nn"
    main(["xor", str(model)])
    capsys.readouterr()
    with pytest.raises(SystemExit):
        main(["run", str(model), "--input", "1,0,1"])
