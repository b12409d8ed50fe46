"""
Projection of a decoded VariationArchive onto a single VCF record for one assembly.
"""

import re

from clinvar_vcf.errors import SkipReason, ValidationSkip
from clinvar_vcf.model.variation_archive import (
    RcvAccession,
    SimpleAllele,
    StatementType,
    VariationArchive,
)
from clinvar_vcf.vcf import VcfRecord

DB_MEDGEN = "MedGen"

ASSEMBLIES = ["GRCh37", "GRCh38"]

REGEX_CHROMOSOME = re.compile(r"[1-9]|1[0-9]|2[0-2]|X|Y|MT")
REGEX_ALLELE = re.compile(r"[ACGT]+")
REGEX_INTERPRETATION_SEPARATOR = re.compile(r"[/;]")


def extract_location(allele: SimpleAllele, assembly: str) -> tuple[str, int, str, str]:
    """
    Returns (CHROM, POS, REF, ALT) of the first SequenceLocation of `allele` on
    `assembly`, with REF and ALT upper-cased.

    Raises ValidationSkip if there is no such location, it lacks VCF coordinates,
    or the coordinates are not a plain substitution/indel of ACGT bases on a
    primary chromosome.
    """
    variation_id = allele.variation_id
    location = allele.location.for_assembly(assembly) if allele.location else None
    if location is None:
        raise ValidationSkip(
            SkipReason.NO_ASSEMBLY_LOCATION,
            f"No {assembly} SequenceLocation: variation_id = {variation_id}",
        )
    if not location.has_vcf_coordinates():
        raise ValidationSkip(
            SkipReason.INCOMPLETE_LOCATION,
            f"Incomplete {assembly} VCF coordinates: variation_id = {variation_id}",
        )

    chromosome = location.chromosome
    reference = location.reference.upper()
    alternate = location.alternate.upper()

    if not REGEX_CHROMOSOME.fullmatch(chromosome):
        raise ValidationSkip(
            SkipReason.INVALID_CHROMOSOME,
            f"Skip chromosome {chromosome}: variation_id = {variation_id}",
        )
    if not REGEX_ALLELE.fullmatch(reference):
        raise ValidationSkip(
            SkipReason.INVALID_REFERENCE,
            f"Skip non-ACGT reference: {reference}, variation_id = {variation_id}",
        )
    if not REGEX_ALLELE.fullmatch(alternate):
        raise ValidationSkip(
            SkipReason.INVALID_ALTERNATE,
            f"Skip non-ACGT alternate: {alternate}, variation_id = {variation_id}",
        )
    if reference == alternate:
        raise ValidationSkip(
            SkipReason.REF_EQUALS_ALT,
            f"Skip ref == alt: {reference} == {alternate},"
            f" variation_id = {variation_id}",
        )
    return chromosome, location.position, reference, alternate


def normalize_interpretation(description: str) -> str:
    """
    Example:
        >>> normalize_interpretation("Pathogenic; Likely pathogenic")
        'pathogenic/likely_pathogenic'
        >>> normalize_interpretation("Conflicting classifications of pathogenicity")
        'conflicting_classifications_of_pathogenicity'
    """
    return "/".join(
        fragment.strip().replace(" ", "_").lower()
        for fragment in REGEX_INTERPRETATION_SEPARATOR.split(description)
    )


def rcv_conditions(rcv: RcvAccession) -> str | None:
    """
    MedGen:<ID1>/<ID2>/...:<Interpretation1>/<Interpretation2>/...:<SubmissionCount>

    Only the germline classification is used. None if the RCV has no MedGen
    conditions or no germline classification.
    """
    medgen_ids = [
        c.id for c in rcv.conditions if c.db == DB_MEDGEN and c.id is not None
    ]
    if not medgen_ids:
        return None
    germline = rcv.classification(StatementType.GermlineClassification)
    if germline is None:
        return None
    return ":".join(
        [
            DB_MEDGEN,
            "/".join(medgen_ids),
            normalize_interpretation(germline.description),
            str(germline.submission_count),
        ]
    )


def synthesize_conditions(rcv_accessions: list[RcvAccession]) -> str:
    """
    The CONDITIONS INFO value: conditions of each RCV joined by "|", in document order.
    Empty if no RCV contributes.
    """
    contributions = [rcv_conditions(rcv) for rcv in rcv_accessions]
    return "|".join(c for c in contributions if c)


def project_variation_archive(archive: VariationArchive, assembly: str) -> VcfRecord:
    """
    Builds the VCF record for `archive` on `assembly`.

    Raises ValidationSkip when the archive does not yield a record.
    """
    record = archive.classified_record
    if record is None:
        raise ValidationSkip(
            SkipReason.MISSING_CLASSIFIED_RECORD,
            f"ClassifiedRecord not found: variation_id = {archive.variation_id}",
        )
    allele = record.variation
    if not isinstance(allele, SimpleAllele):
        raise ValidationSkip(
            SkipReason.MISSING_SIMPLE_ALLELE,
            f"SimpleAllele not found: variation_id = {archive.variation_id}",
        )

    chromosome, position, reference, alternate = extract_location(allele, assembly)

    conditions = synthesize_conditions(record.rcv_accessions)
    if not conditions:
        raise ValidationSkip(
            SkipReason.NO_CONDITIONS,
            f"No ClassifiedCondition associated with {DB_MEDGEN}:"
            f" variation_id = {archive.variation_id}",
        )

    return VcfRecord(
        chrom=chromosome,
        pos=position,
        variation_id=allele.variation_id,
        ref=reference,
        alt=alternate,
        allele_id=allele.allele_id,
        conditions=conditions,
    )
