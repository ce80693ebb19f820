import json

import pytest

from rollimport.cli import main

from conftest import record_text


def test_text_command_writes_json(tmp_path):
    source = tmp_path / "roll.txt"
    source.write_text(record_text(1, "রহিম", father="করিম") + record_text(2, "করিম"), encoding="utf-8")
    output = tmp_path / "out" / "voters.json"

    assert main(["text", str(source), "--output", str(output)]) == 0

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["totalExtracted"] == 2
    assert data["voters"][0]["fatherName"] == "করিম"


def test_missing_input_fails(tmp_path):
    assert main(["text", str(tmp_path / "missing.txt")]) == 1


def test_save_requires_ids(tmp_path):
    with pytest.raises(SystemExit):
        main(["text", str(tmp_path / "roll.txt"), "--save"])
