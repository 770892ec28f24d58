import shutil

import pandas as pd
import pytest

from carshare import config, verify
from carshare.sources import SourceRegistry
from carshare.verify import all_ok, save_report, verify_provider


@pytest.fixture
def registry(tmp_path):
    return SourceRegistry(tmp_path / "source_urls.json")


def test_bundled_tables_pass_offline(registry) -> None:
    results = verify_provider("car4way", registry=registry, check_remote=False)
    assert [r.check for r in results] == [
        "file:basic.tsv", "load:basic.tsv",
        "file:active.tsv", "load:active.tsv",
        "file:business.tsv", "load:business.tsv",
    ]
    assert all_ok(results)


def test_missing_and_broken_tables(registry, tmp_path) -> None:
    data_dir = tmp_path / "export"
    data_dir.mkdir()
    shutil.copy(config.CAR4WAY_DATA_DIR / "basic.tsv", data_dir / "basic.tsv")
    (data_dir / "active.tsv").write_text("item\tlegend\tfancy\tboss\nNěco\t1\t2\t3\n",
                                         encoding="utf-8")

    results = {r.check: r for r in verify_provider("car4way", registry=registry,
                                                   data_dir=data_dir, check_remote=False)}
    assert results["load:basic.tsv"].ok
    assert results["file:active.tsv"].ok
    assert not results["load:active.tsv"].ok
    assert "Něco" in results["load:active.tsv"].detail
    assert not results["file:business.tsv"].ok
    assert "load:business.tsv" not in results


@pytest.mark.parametrize("status, ok", [(200, True), (302, True), (404, False), (None, False)])
def test_url_check(registry, monkeypatch, status, ok) -> None:
    monkeypatch.setattr(verify, "check_url",
                        lambda url: (status, "application/pdf" if status else "timeout", url))
    results = verify_provider("car4way", registry=registry)
    assert results[-1].check == "url"
    assert results[-1].ok is ok


def test_pdf_check(registry, tmp_path) -> None:
    missing = verify_provider("car4way", registry=registry, check_remote=False,
                              pdf_path=tmp_path / "cenik.pdf")
    assert not missing[-1].ok

    garbage = tmp_path / "garbage.pdf"
    garbage.write_bytes(b"this is not a pdf")
    broken = verify_provider("car4way", registry=registry, check_remote=False, pdf_path=garbage)
    assert broken[-1].check == "pdf"
    assert not broken[-1].ok


def test_save_report(registry, tmp_path) -> None:
    results = verify_provider("car4way", registry=registry, check_remote=False)
    path = save_report(results, tmp_path / "out" / "verify.csv")
    frame = pd.read_csv(path)
    assert list(frame.columns) == ["check", "ok", "detail"]
    assert len(frame) == 6
    assert frame["ok"].all()


def _one_page_pdf() -> bytes:
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 595 842] >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_at
    return bytes(out)


def test_pdf_check_counts_pages(registry, tmp_path) -> None:
    pdf_path = tmp_path / "cenik.pdf"
    pdf_path.write_bytes(_one_page_pdf())
    results = verify_provider("car4way", registry=registry, check_remote=False, pdf_path=pdf_path)
    assert results[-1].check == "pdf"
    assert results[-1].ok
    assert "1 pages" in results[-1].detail
