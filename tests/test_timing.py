import io

import pytest

from lantern.timing import (
    PHASE_LIFT,
    PHASE_PARSE,
    PHASE_VARS,
    FileTimings,
    FuncTimings,
    PipelineReport,
    timed,
)


def _func(name, **phases):
    timings = FuncTimings(name)
    for phase, duration in phases.items():
        timings.record(phase, duration)
    return timings


def test_func_total_sums_phases():
    timings = _func("f", lift=0.5, vars=0.25)
    assert timings.phases == [("lift", 0.5), ("vars", 0.25)]
    assert timings.total() == pytest.approx(0.5 + 0.25)


def test_empty_func_total_is_zero():
    assert FuncTimings("f").total() == 0


def test_file_total_lift_only_counts_lift():
    ft = FileTimings("a.luau", functions=[_func("f", lift=0.5, vars=0.25), _func("g", lift=0.125)])
    assert ft.total_lift() == pytest.approx(0.5 + 0.125)


def test_file_total_includes_parse():
    ft = FileTimings("a.luau", parse_time=0.5, functions=[_func("f", lift=0.25)])
    assert ft.total_all_phases() == pytest.approx(0.5 + 0.25)


def test_phase_totals_always_has_parse():
    report = PipelineReport()
    assert report.phase_totals() == {PHASE_PARSE: 0}
    assert report.total_functions() == 0
    assert report.grand_total() == 0


def test_phase_totals_aggregate_across_files():
    report = PipelineReport()
    report.add(FileTimings("a", parse_time=0.5, functions=[_func("f", lift=0.25)]))
    report.add(
        FileTimings("b", parse_time=0.25, functions=[_func("g", lift=0.125, vars=0.5)])
    )
    totals = report.phase_totals()
    assert totals[PHASE_PARSE] == pytest.approx(0.5 + 0.25)
    assert totals[PHASE_LIFT] == pytest.approx(0.25 + 0.125)
    assert totals[PHASE_VARS] == pytest.approx(0.5)
    assert report.total_functions() == 2
    assert report.grand_total() == pytest.approx(sum(totals.values()))


def test_print_summary_writes_table():
    report = PipelineReport()
    report.add(FileTimings("a", parse_time=0.0, functions=[_func("f", lift=0.5)]))
    out = io.StringIO()
    report.print_summary(out)
    text = out.getvalue()
    assert "--- Performance Summary ---" in text
    assert "1 files, 1 functions in" in text
    lift_line = next(line for line in text.splitlines() if "lift" in line)
    assert "500.00ms" in lift_line
    assert "(100.0%)" in lift_line
    assert "avg/function:" in text


def test_print_summary_without_functions_has_no_average():
    out = io.StringIO()
    PipelineReport().print_summary(out)
    assert "avg/function" not in out.getvalue()
    assert "0 files, 0 functions" in out.getvalue()


def test_print_slowest_orders_by_total():
    report = PipelineReport()
    report.add(
        FileTimings(
            "dir/sub/a.luau",
            functions=[_func("fast", lift=0.125), _func("slow", lift=0.5)],
        )
    )
    out = io.StringIO()
    report.print_slowest(1, out)
    text = out.getvalue()
    assert "--- Slowest 1 Functions ---" in text
    assert "a.luau::slow" in text
    assert "fast" not in text
    assert "dir/" not in text


def test_print_slowest_lists_all_when_n_is_large():
    report = PipelineReport()
    report.add(FileTimings("a", functions=[_func("f", lift=0.125), _func("g", lift=0.5)]))
    out = io.StringIO()
    report.print_slowest(10, out)
    text = out.getvalue()
    assert text.index("a::g") < text.index("a::f")


def test_timed_returns_result_and_duration():
    result, elapsed = timed(lambda: "done")
    assert result == "done"
    assert elapsed >= 0