"""Tests for the command-line batch runner."""

import csv

import pytest

from triage.tools.run_batch import main, run


def _write_csv(rows: list[dict], path) -> None:
    with open(path, "w", encoding="utf-8-sig", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=rows[0].keys(), delimiter=";")
        writer.writeheader()
        writer.writerows(rows)


@pytest.fixture
def data_dir(tmp_path):
    directory = tmp_path / "data"
    directory.mkdir()
    _write_csv([
        {"GUID клиента": "g1", "Описание": "Не могу войти в приложение", "Сегмент клиента": "Mass",
         "Страна": "Казахстан", "Область": "Акмолинская", "Населённый пункт": "Астана"},
        {"GUID клиента": "g2", "Описание": "Hello, I need a refund", "Сегмент клиента": "VIP",
         "Страна": "Казахстан", "Область": "Акмолинская", "Населённый пункт": "Астана"},
    ], directory / "tickets.csv")
    _write_csv([
        {"ФИО": "Сериков", "Должность": "Специалист", "Офис": "Астана", "Навыки": "KZ",
         "Количество обращений в работе": "2"},
    ], directory / "managers.csv")
    _write_csv([{"Офис": "Астана", "Адрес": "пр. Мангилик Ел 1"}], directory / "business_units.csv")
    return directory


@pytest.mark.asyncio
async def test_run_rules_only(data_dir, tmp_path):
    output = tmp_path / "out.csv"

    result = await run(data_dir, output, rules_only=True)

    assert result.total_input == 2
    assert result.assigned == 1
    assert result.unassigned == 1
    with open(output, encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["ClientId"] for r in rows] == ["g1", "g2"]
    assert rows[0]["SelectedManager"] == "Сериков"
    assert rows[1]["SelectedManager"] == "UNASSIGNED"
    assert rows[0]["AnalysisSource"] == "Rules"


def test_main_success(data_dir, tmp_path):
    output = tmp_path / "results.csv"
    code = main(["--data-dir", str(data_dir), "--output", str(output), "--rules-only"])
    assert code == 0
    assert output.is_file()


def test_main_missing_csv(tmp_path):
    code = main(["--data-dir", str(tmp_path), "--output", str(tmp_path / "x.csv"), "--rules-only"])
    assert code == 1
    assert not (tmp_path / "x.csv").exists()
