"""
Tests for Markdown/HTML report rendering.
"""

from clonalsim.reporting import render_report, report_context


def test_render_default_report(small_result, temp_dir):
    md_path, html_path = render_report(small_result, temp_dir)

    markdown_text = md_path.read_text(encoding="utf-8")
    assert md_path.name == "report.md"
    assert "# ClonalSim Simulation Report" in markdown_text
    assert "- Total mutations: 33" in markdown_text
    assert "| Clone2 | 0.3 | 6 |" in markdown_text
    assert f"`{small_result.metadata['config_hash']}`" in markdown_text

    html = html_path.read_text(encoding="utf-8")
    assert "<table>" in html
    assert "<h1>ClonalSim Simulation Report</h1>" in html


def test_report_lists_plots_and_skipped_groups(small_result, temp_dir):
    result = small_result.__class__(
        mutations=small_result.mutations,
        params=small_result.params,
        clonal_structure=small_result.clonal_structure,
        metadata={**small_result.metadata, "skipped_groups": ["4 5"]},
    )
    md_path, _ = render_report(result, temp_dir, plots={"vaf_density": str(temp_dir / "vaf_density.png")})
    text = md_path.read_text(encoding="utf-8")

    assert "Skipped shared groups: 4 5" in text
    assert "![vaf_density](vaf_density.png)" in text


def test_custom_template(small_result, temp_dir):
    template = temp_dir / "template.md"
    template.write_text("Purity {{ summary.tumor_purity | round(2) }} seed {{ metadata.seed }}\n", encoding="utf-8")

    md_path, _ = render_report(small_result, temp_dir, template_path=template)
    assert md_path.read_text(encoding="utf-8").strip() == "Purity 0.9 seed 42"


def test_report_context(small_result):
    context = report_context(small_result)
    assert context["summary"]["n_clones"] == 3
    assert [row["Clone"] for row in context["clones"]] == ["Clone1", "Clone2", "Clone3"]
    assert context["metadata"]["seed"] == 42
