"""Exporters from a ``SimulationResult`` to downstream tool formats.

Every exporter builds a new table; the result itself is never modified.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .exceptions import ExportError
from .result import SimulationResult, get_mutations

logger = logging.getLogger(__name__)

INTERVAL_METADATA_COLUMNS = [
    "Mutation", "Ref", "Alt", "True_VAF", "VAF",
    "Depth", "Alt_reads", "Clone", "Type", "Clone_IDs",
]
VCF_COLUMNS = ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT"]


def _require(result: SimulationResult) -> pd.DataFrame:
    if not isinstance(result, SimulationResult):
        raise ExportError(f"expected SimulationResult, got {type(result).__name__}")
    return get_mutations(result)


def to_dataframe(
    result: SimulationResult,
    path: Optional[str | Path] = None,
    include_true_vaf: bool = True,
) -> pd.DataFrame:
    """Mutation table as a DataFrame, optionally written to CSV."""
    df = _require(result)
    if not include_true_vaf:
        df = df.drop(columns=["True_VAF"])

    if path is not None:
        df.to_csv(path, index=False)
        logger.info("Data frame written to: %s", path)
    return df


def to_intervals(result: SimulationResult, include_metadata: bool = True) -> pd.DataFrame:
    """Single-base genomic intervals (1-based, closed) for every mutation."""
    mutations = _require(result)
    intervals = pd.DataFrame({
        "seqnames": mutations["Chromosome"],
        "start": mutations["Position"].astype("int64"),
        "end": mutations["Position"].astype("int64"),
        "width": 1,
        "strand": "*",
    })
    if include_metadata:
        present = [col for col in INTERVAL_METADATA_COLUMNS if col in mutations.columns]
        intervals = pd.concat([intervals, mutations[present]], axis=1)
    return intervals


def _chromosome_order(chrom: pd.Series) -> pd.Series:
    return chrom.str.replace("chr", "", regex=False).astype(int)


def to_vcf(
    result: SimulationResult,
    sample_name: str = "TumorSample",
    path: Optional[str | Path] = None,
) -> pd.DataFrame:
    """VCF-style records; sites where Ref equals Alt are dropped.

    Returns a table with one row per real variant. When ``path`` is given
    a VCFv4.3 file is written with per-sample GT:DP:AD fields.
    """
    mutations = _require(result)
    is_variant = mutations["Ref"] != mutations["Alt"]
    n_dropped = int((~is_variant).sum())
    if n_dropped:
        logger.debug("Dropping %d records with Ref == Alt", n_dropped)
    variants = mutations[is_variant]

    records = pd.DataFrame({
        "CHROM": variants["Chromosome"],
        "POS": variants["Position"].astype("int64"),
        "ID": variants["Mutation"],
        "REF": variants["Ref"],
        "ALT": variants["Alt"],
        "totalDepth": variants["Depth"].astype("int64"),
        "refDepth": (variants["Depth"] - variants["Alt_reads"]).astype("int64"),
        "altDepth": variants["Alt_reads"].astype("int64"),
        "sampleNames": sample_name,
        "TRUE_VAF": variants["True_VAF"],
        "VAF": variants["VAF"],
        "CLONE": variants["Clone"],
        "TYPE": variants["Type"],
        "CLONE_IDS": variants["Clone_IDs"],
    }).reset_index(drop=True)

    if path is not None:
        write_vcf(records, sample_name, path)
        logger.info("VCF file written to: %s", path)
    return records


def write_vcf(records: pd.DataFrame, sample_name: str, path: str | Path) -> Path:
    """Write records produced by ``to_vcf`` as a VCFv4.3 file."""
    path = Path(path)
    ordered = records.assign(_chrom=_chromosome_order(records["CHROM"])).sort_values(
        ["_chrom", "POS"], kind="mergesort"
    ).drop(columns="_chrom")
    contigs = sorted(records["CHROM"].unique(), key=lambda c: int(c.replace("chr", "")))

    with open(path, "w", encoding="utf-8") as f:
        f.write("##fileformat=VCFv4.3\n")
        f.write(f"##source=clonalsim-{__version__}\n")
        for contig in contigs:
            f.write(f"##contig=<ID={contig}>\n")
        f.write('##INFO=<ID=TRUE_VAF,Number=1,Type=Float,Description="Biological VAF before sequencing noise">\n')
        f.write('##INFO=<ID=VAF,Number=1,Type=Float,Description="Observed VAF">\n')
        f.write('##INFO=<ID=CLONE,Number=1,Type=String,Description="Clone label">\n')
        f.write('##INFO=<ID=TYPE,Number=1,Type=String,Description="Mutation type">\n')
        f.write('##INFO=<ID=CLONE_IDS,Number=.,Type=String,Description="Clones carrying the variant">\n')
        f.write('##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">\n')
        f.write('##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Total depth">\n')
        f.write('##FORMAT=<ID=AD,Number=R,Type=Integer,Description="Ref and alt read depths">\n')
        f.write("\t".join(VCF_COLUMNS + [sample_name]) + "\n")

        for row in ordered.itertuples(index=False):
            info = (
                f"TRUE_VAF={row.TRUE_VAF:.6f};VAF={row.VAF:.6f};CLONE={row.CLONE};"
                f"TYPE={row.TYPE};CLONE_IDS={row.CLONE_IDS}"
            )
            sample = f"0/1:{row.totalDepth}:{row.refDepth},{row.altDepth}"
            fields = [row.CHROM, str(row.POS), row.ID, row.REF, row.ALT, ".", "PASS", info, "GT:DP:AD", sample]
            f.write("\t".join(fields) + "\n")
    return path


def to_pyclone(result: SimulationResult, path: str | Path, sample_id: str = "sample1") -> pd.DataFrame:
    """PyClone input TSV assuming diploid, copy-neutral sites."""
    mutations = _require(result)
    pyclone_df = pd.DataFrame({
        "mutation_id": mutations["Mutation"],
        "ref_counts": mutations["Depth"] - mutations["Alt_reads"],
        "var_counts": mutations["Alt_reads"],
        "normal_cn": 2,
        "minor_cn": 0,
        "major_cn": 2,
        "sample_id": sample_id,
    })
    pyclone_df.to_csv(path, sep="\t", index=False)
    logger.info("PyClone input written to: %s", path)
    return pyclone_df


def to_sciclone(result: SimulationResult, path: str | Path) -> pd.DataFrame:
    """SciClone input TSV; VAF is expressed in percent."""
    mutations = _require(result)
    sciclone_df = pd.DataFrame({
        "chr": mutations["Chromosome"],
        "pos": mutations["Position"],
        "ref_reads": mutations["Depth"] - mutations["Alt_reads"],
        "var_reads": mutations["Alt_reads"],
        "vaf": mutations["VAF"] * 100,
    })
    sciclone_df.to_csv(path, sep="\t", index=False)
    logger.info("SciClone input written to: %s", path)
    return sciclone_df


EXPORTERS = {
    "csv": lambda result, path, sample_name: to_dataframe(result, path=path),
    "vcf": lambda result, path, sample_name: to_vcf(result, sample_name=sample_name or "TumorSample", path=path),
    "pyclone": lambda result, path, sample_name: to_pyclone(result, path, sample_id=sample_name or "sample1"),
    "sciclone": lambda result, path, sample_name: to_sciclone(result, path),
    "intervals": lambda result, path, sample_name: to_intervals(result).to_csv(path, sep="\t", index=False),
}


def export_result(
    result: SimulationResult,
    fmt: str,
    path: str | Path,
    sample_name: Optional[str] = None,
) -> Path:
    """Dispatch to the exporter registered under ``fmt``."""
    try:
        exporter = EXPORTERS[fmt]
    except KeyError:
        raise ExportError(
            f"Unknown export format '{fmt}'. Choose from: {', '.join(EXPORTERS)}",
            {"format": fmt},
        ) from None
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    exporter(result, path, sample_name)
    return path
