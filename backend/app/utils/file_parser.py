"""
file_parser.py
==============

アップロードされた **CSV / Excel** の品番マスタを `pandas.DataFrame`
へ変換するユーティリティ。

* 拡張子 / MIME でファイル種別を判定
* CSV は **chardet** でエンコーディング推定＋フォールバックを順次試行
* ヘッダー行から BOM / 全角スペースを除去し、別名を正規ラベルへ寄せる
* 値はすべて **string 型** で読み取り (`dtype=str`, `keep_default_na=False`)
* 空ファイル・非対応形式は ``ValueError`` を送出
"""

from __future__ import annotations

import io
import mimetypes
import unicodedata
from pathlib import Path
from typing import Final, Iterable

import chardet
import pandas as pd
from fastapi import UploadFile


ENCODINGS: Final[list[str]] = [
    "utf-8",
    "utf-8-sig",
    "utf-16",
    "cp932",
    "iso8859-1",
]

# 基幹システム毎に揺れるヘッダー名 → 正規ラベル
_ALIASES: Final[dict[str, str]] = {
    "product_number": "品番",
    "品番コード": "品番",
    "商品ID": "品番",
    "location_number": "ロケーション番号",
    "ロケーション": "ロケーション番号",
    "ロケーションコード": "ロケーション番号",
    "box_type": "箱種",
    "location_capacity": "収容能力",
    "容量": "収容能力",
}


def read_dataframe(file: UploadFile | str | Path | bytes | bytearray) -> pd.DataFrame:
    """
    Parameters
    ----------
    file :
        * **FastAPI UploadFile** – 実運用でのアップロード
        * **str / Path** – テストやローカル実行
        * **bytes / bytearray** – メモリ上のバイト列（CSV とみなす）

    Raises
    ------
    ValueError
        空ファイル / 非対応形式 / エンコーディング判定失敗 / データ行なし
    """
    raw, filename = _get_raw_and_name(file)

    if not raw:
        raise ValueError("File is empty")

    mime, _ = mimetypes.guess_type(filename)
    lower_name = filename.lower()

    # ----------------------------- Excel ----------------------------------
    if lower_name.endswith((".xlsx", ".xls")):
        df = pd.read_excel(io.BytesIO(raw), dtype=str, keep_default_na=False)

    # ----------------------------- CSV ------------------------------------
    elif mime in ("text/csv", None) or lower_name.endswith(".csv"):
        might_be_utf16 = b"\x00" in raw[:1024]
        enc_guess: str = (chardet.detect(raw[:4096]).get("encoding") or "").lower()
        # UTF-8（BOM 有無とも）→ chardet 推定 → フォールバックの順
        enc_try_order = (["utf-16"] if might_be_utf16 else []) + ["utf-8-sig", enc_guess] + ENCODINGS

        for enc in _unique(e for e in enc_try_order if e):
            try:
                df = pd.read_csv(
                    io.BytesIO(raw),
                    encoding=enc,
                    dtype=str,
                    keep_default_na=False,
                    sep=None,
                    engine="python",
                )
                break
            except (UnicodeDecodeError, UnicodeError):
                continue
        else:  # すべて失敗
            raise ValueError("Cannot decode CSV – unknown encoding")

    else:
        raise ValueError("Unsupported file type (only .csv/.xlsx/.xls accepted)")

    # ---------------------- column normalisation --------------------------
    df.columns = (
        df.columns.astype(str)
        .map(lambda s: unicodedata.normalize("NFKC", s))
        .str.replace("\ufeff", "", regex=False)   # strip BOM
        .str.replace("　", "", regex=False)       # full‑width space
        .str.strip()
    )
    df = df.rename(columns={c: _ALIASES[c] for c in df.columns if c in _ALIASES})

    if df.empty:
        raise ValueError("File has no data rows")

    return df


__all__ = ["read_dataframe"]


# --------------------------------------------------------------------------- #
# helpers (private)                                                           #
# --------------------------------------------------------------------------- #
def _get_raw_and_name(
    file: UploadFile | str | Path | bytes | bytearray,
) -> tuple[bytes, str]:
    """Convert various *file‑like* inputs into raw bytes + filename."""
    if isinstance(file, (bytes, bytearray)):
        return bytes(file), ""

    if isinstance(file, (str, Path)):
        p = Path(file)
        return p.read_bytes(), p.name

    # UploadFile / duck typing (objects with ``.file`` & ``.filename``)
    if hasattr(file, "file") and hasattr(file, "filename"):
        return file.file.read(), getattr(file, "filename", "") or ""

    raise TypeError(
        "file must be UploadFile | str | Path | bytes | bytearray; "
        f"got {type(file)}"
    )


def _unique(seq: Iterable[str]) -> list[str]:
    """順序を保ったまま重複削除"""
    seen: set[str] = set()
    out: list[str] = []
    for item in seq:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out
