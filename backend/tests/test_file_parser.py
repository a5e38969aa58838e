import pytest

from app.utils.file_parser import read_dataframe

HEADER = "品番,ロケーション番号,箱種,収容能力"


def test_utf8_bom_csv():
    raw = f"{HEADER}\nA-1,100100,A,10\n".encode("utf-8-sig")
    df = read_dataframe(raw)
    assert list(df.columns) == ["品番", "ロケーション番号", "箱種", "収容能力"]
    assert df.iloc[0]["品番"] == "A-1"


def test_cp932_csv(tmp_path):
    path = tmp_path / "products.csv"
    path.write_bytes(f"{HEADER}\nA-1,100100,段ボール,10\n".encode("cp932"))
    df = read_dataframe(path)
    assert df.iloc[0]["箱種"] == "段ボール"


def test_header_aliases_and_fullwidth():
    raw = "ｐｒｏｄｕｃｔ＿ｎｕｍｂｅｒ,ロケーション,容量\nA-1,1,2\n".encode("utf-8")
    df = read_dataframe(raw)
    assert set(df.columns) == {"品番", "ロケーション番号", "収容能力"}


def test_values_stay_strings():
    df = read_dataframe(f"{HEADER}\n00012,000100,,0050\n".encode("utf-8"))
    assert df.iloc[0]["品番"] == "00012"
    assert df.iloc[0]["箱種"] == ""


def test_empty_file():
    with pytest.raises(ValueError):
        read_dataframe(b"")


def test_unsupported_extension(tmp_path):
    path = tmp_path / "products.json"
    path.write_text("{}")
    with pytest.raises(ValueError):
        read_dataframe(path)
