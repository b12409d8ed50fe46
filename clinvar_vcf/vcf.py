"""
VCF output of projected ClinVar variants.
"""

import dataclasses
from typing import IO

CONTIGS = [str(i) for i in range(1, 23)] + ["X", "Y", "MT"]

VCF_HEADER = "\n".join(
    [
        "##fileformat=VCFv4.3",
        '##FILTER=<ID=PASS,Description="All filters passed">',
        '##ID=<Description="ClinVar Variation ID">',
        '##INFO=<ID=ALLELEID,Number=1,Type=Integer,Description="ClinVar Allele ID">',
        "##INFO=<ID=CONDITIONS,Number=1,Type=String,Description="
        '"MedGen:<ID1>/<ID2>/...:<Interpretation1>/<Interpretation2>/...'
        ':<SubmissionCount>|MedGen:...">',
        *[f"##contig=<ID={contig}>" for contig in CONTIGS],
        "\t".join(["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO"]),
    ]
)

MISSING_VALUE = "."


@dataclasses.dataclass(frozen=True)
class VcfRecord:
    chrom: str
    pos: int
    variation_id: int
    ref: str
    alt: str
    allele_id: int
    conditions: str

    def info(self) -> str:
        return f"ALLELEID={self.allele_id};CONDITIONS={self.conditions}"


def format_record(record: VcfRecord) -> str:
    """
    The tab separated VCF data line for `record`, without a line terminator.
    QUAL and FILTER are always missing.
    """
    return "\t".join(
        [
            record.chrom,
            str(record.pos),
            str(record.variation_id),
            record.ref.upper(),
            record.alt.upper(),
            MISSING_VALUE,
            MISSING_VALUE,
            record.info(),
        ]
    )


class VcfWriter:
    """
    Writes VCF_HEADER to the binary file object `f_out` on construction, then
    one line per record written.
    """

    def __init__(self, f_out: IO[bytes]):
        self.f_out = f_out
        self.records_written = 0
        self._write_line(VCF_HEADER)

    def _write_line(self, line: str):
        self.f_out.write(line.encode("utf-8"))
        self.f_out.write("\n".encode("utf-8"))

    def write(self, record: VcfRecord):
        self._write_line(format_record(record))
        self.records_written += 1

    def flush(self):
        self.f_out.flush()
