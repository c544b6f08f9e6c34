"""Reporting utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jinja2
import markdown

from .result import SimulationResult, get_clonal_structure, summarize
from .utils import ARTIFACT_FILENAMES, as_json_ready


def render_report(
    result: SimulationResult,
    output_dir: Path,
    template_path: Path | None = None,
    plots: dict[str, str] | None = None,
) -> tuple[Path, Path]:
    environment = jinja2.Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)
    if template_path is None:
        template = DEFAULT_TEMPLATE
    else:
        template = Path(template_path).read_text(encoding="utf-8")

    md_content = environment.from_string(template).render(
        **report_context(result),
        plots={key: Path(value).name for key, value in (plots or {}).items()},
        json_params=json.dumps(as_json_ready(result.params), indent=2),
    )

    output_dir = Path(output_dir)
    md_path = output_dir / ARTIFACT_FILENAMES["report_md"]
    md_path.write_text(md_content, encoding="utf-8")

    html = markdown.markdown(md_content, extensions=["tables", "fenced_code"])
    html_path = output_dir / ARTIFACT_FILENAMES["report_html"]
    html_path.write_text(html, encoding="utf-8")
    return md_path, html_path


def report_context(result: SimulationResult) -> dict[str, Any]:
    """Values exposed to report templates, for custom templates."""
    return {
        "summary": summarize(result).to_dict(),
        "clones": get_clonal_structure(result).to_dict(orient="records"),
        "metadata": dict(result.metadata),
    }


DEFAULT_TEMPLATE = """
# ClonalSim Simulation Report

## Summary

- Total mutations: {{ summary.n_mutations }}
- Number of clones: {{ summary.n_clones }}
- Tumor purity: {{ summary.tumor_purity | round(3) }}
- Seed: {{ metadata.seed }}
- Config hash: `{{ metadata.config_hash }}`
{% if metadata.skipped_groups %}
- Skipped shared groups: {{ metadata.skipped_groups | join(", ") }}
{% endif %}

## Clonal Structure

| Clone | Frequency | Private Mutations |
| --- | --- | --- |
{% for row in clones %}
| {{ row.Clone }} | {{ row.Frequency | round(3) }} | {{ row.N_private_mutations }} |
{% endfor %}

## Mutation Types

| Type | Count |
| --- | --- |
{% for name, count in summary.mutation_types.items() %}
| {{ name }} | {{ count }} |
{% endfor %}

{% if summary.depth_summary %}
## Sequencing Depth

- Mean: {{ summary.depth_summary.mean | round(2) }}
- Median: {{ summary.depth_summary.median }}
- Range: {{ summary.depth_summary.min }} - {{ summary.depth_summary.max }}
{% endif %}

{% for name, filename in plots.items() %}
![{{ name }}]({{ filename }})
{% endfor %}

## Parameters

```json
{{ json_params }}
```
"""
