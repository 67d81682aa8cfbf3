"""End-to-end run of the report on the synthetic movies data."""

import run_all


def test_full_report(movies_csv, names_csv, tmp_path):
    out_dir = tmp_path / "Output"
    fig_dir = tmp_path / "Figure"

    result = run_all.main(movies_csv=movies_csv, names_csv=names_csv, out_dir=out_dir, figure_dir=fig_dir)

    summary = (out_dir / "report_summary.txt").read_text()
    assert "Research question" in summary
    assert result["selection"]["formula"] in summary
    assert "Prediction for Deadpool" in summary
    assert (out_dir / "model" / "coefficients.csv").exists()
    assert (out_dir / "diagnostics" / "assumption_tests.csv").exists()
    assert (out_dir / "prediction" / "prediction.csv").exists()
    assert (fig_dir / "eda" / "response_distribution.png").exists()
    assert (fig_dir / "diagnostics" / "diagnostic_plots.png").exists()
    assert "critics_score" in result["selection"]["selected"]
