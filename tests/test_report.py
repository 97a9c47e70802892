from bookdesk.core.models import BookRecord, ImportOutcome, ImportRowError
from bookdesk.core.report import ERROR_COLUMNS, ImportReportBuilder, present

from conftest import RecordingReporter


def make_outcome(books=(), errors=()):
    return ImportOutcome(imported_records=tuple(books), row_errors=tuple(errors))


def test_report_with_errors():
    outcome = make_outcome(
        [BookRecord(id=1, title="A")],
        [ImportRowError(3, "bad,row", "missing isbn")],
    )
    report = ImportReportBuilder().build(outcome)
    assert report.records == (BookRecord(id=1, title="A"),)
    assert report.columns == ERROR_COLUMNS == ("Line", "Content", "Error")
    assert report.rows == ((3, "bad,row", "missing isbn"),)
    assert report.summary.startswith("Import finished, some items were not created or updated.")
    assert "Imported: 1" in report.summary
    assert "Errors: 1" in report.summary


def test_report_without_errors():
    report = ImportReportBuilder().build(make_outcome([BookRecord(id=1), BookRecord(id=2)]))
    assert report.rows == ()
    assert report.summary.splitlines() == [
        "Import finished successfully, all items were created or updated.",
        "",
        "Summary:",
        "• Imported: 2",
        "• Errors: 0",
    ]


def test_empty_outcome():
    report = ImportReportBuilder().build(make_outcome())
    assert report.records == ()
    assert "Imported: 0" in report.summary


def test_rows_keep_server_order():
    errors = [ImportRowError(n, f"line {n}", "bad") for n in (7, 2, 5)]
    report = ImportReportBuilder().build(make_outcome(errors=errors))
    assert [row[0] for row in report.rows] == [7, 2, 5]


def test_outcome_decodes_missing_keys_as_empty():
    outcome = ImportOutcome.from_dict({})
    assert outcome.imported_records == ()
    assert outcome.row_errors == ()


def test_present_sends_table():
    sink = RecordingReporter()
    report = ImportReportBuilder().build(
        make_outcome(errors=[ImportRowError(1, "x", "bad")])
    )
    present(report, sink)
    assert sink.tables == [(report.summary, ["Line", "Content", "Error"], [(1, "x", "bad")])]
