"""
Unit tests for the tabular file reader.
"""

import sys
from pathlib import Path

import pandas as pd
import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from catalog_intake.file_loader import frame_to_table, load_file, read_table


class TestReadTable:
    def test_csv_cells_stay_text(self, tmp_path):
        path = tmp_path / "products.csv"
        path.write_text("SKU,Title,Price\n007,Steel Bottle,19.90\n008,Cup,\n", encoding="utf-8")
        headers, rows = read_table(path)
        assert headers == ["SKU", "Title", "Price"]
        assert rows[0] == {"SKU": "007", "Title": "Steel Bottle", "Price": "19.90"}
        assert rows[1]["Price"] == ""

    def test_semicolon_delimiter(self, tmp_path):
        path = tmp_path / "products.csv"
        path.write_text("Title;Price\nSteel Bottle;19.99\nCup;5\n", encoding="utf-8")
        headers, rows = read_table(path)
        assert headers == ["Title", "Price"]
        assert rows[1] == {"Title": "Cup", "Price": "5"}

    def test_tsv(self, tmp_path):
        path = tmp_path / "products.tsv"
        path.write_text("Title\tPrice\nSteel Bottle\t19.99\n", encoding="utf-8")
        headers, rows = read_table(path)
        assert headers == ["Title", "Price"]
        assert rows == [{"Title": "Steel Bottle", "Price": "19.99"}]

    def test_bom_and_latin1(self, tmp_path):
        bom = tmp_path / "bom.csv"
        bom.write_bytes("Title,Price\nBottle,5\n".encode("utf-8-sig"))
        assert read_table(bom)[0] == ["Title", "Price"]

        latin = tmp_path / "latin.csv"
        latin.write_bytes("Title,Price\nCaf\xe9 Mug,5\n".encode("latin-1"))
        _, rows = read_table(latin)
        assert rows[0]["Title"] == "Caf\xe9 Mug"

    def test_xlsx_first_sheet(self, tmp_path):
        path = tmp_path / "products.xlsx"
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame({"Title": ["Steel Bottle"], "Price": ["19.99"]}).to_excel(writer, sheet_name="Products", index=False)
            pd.DataFrame({"Other": ["x"]}).to_excel(writer, sheet_name="Notes", index=False)

        headers, rows = read_table(path)
        assert headers == ["Title", "Price"]
        assert rows == [{"Title": "Steel Bottle", "Price": "19.99"}]

        headers, _ = read_table(path, sheet_name="Notes")
        assert headers == ["Other"]

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_table(tmp_path / "missing.csv")


def test_frame_to_table_fills_missing():
    df = pd.DataFrame({"Title": ["Bottle", None], "Price": [None, "5"]})
    headers, rows = frame_to_table(df)
    assert headers == ["Title", "Price"]
    assert rows == [{"Title": "Bottle", "Price": ""}, {"Title": "", "Price": "5"}]


def test_frame_to_table_empty():
    assert frame_to_table(pd.DataFrame(columns=["Title"])) == (["Title"], [])
