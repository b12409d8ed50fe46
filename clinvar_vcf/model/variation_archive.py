"""
Data model for the parts of a ClinVar VariationArchive used to build VCF records.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from enum import StrEnum
from typing import Union

from clinvar_vcf.errors import DecodeError
from clinvar_vcf.model.common import (
    Model,
    int_or_none,
    required,
    required_int,
    single,
)
from clinvar_vcf.utils import ensure_list, extract, get, text_of

_logger = logging.getLogger("clinvar_vcf")


class StatementType(StrEnum):
    GermlineClassification = "GermlineClassification"
    SomaticClinicalImpact = "SomaticClinicalImpact"
    OncogenicityClassification = "OncogenicityClassification"


@dataclasses.dataclass
class SequenceLocation(Model):
    """
    One placement of a variant on one assembly.

    <SequenceLocation Assembly="GRCh38" Chr="7" Accession="NC_000007.14"
                      start="4820844" stop="4820847" positionVCF="4820844"
                      referenceAlleleVCF="GGAT" alternateAlleleVCF="TGCTGTAAACTGTAACTGTAAA"/>
    """

    assembly: str
    chromosome: str
    position: int | None
    reference: str | None
    alternate: str | None

    @staticmethod
    def from_xml(inp: dict):
        return SequenceLocation(
            assembly=required(inp, "@Assembly", "SequenceLocation"),
            chromosome=required(inp, "@Chr", "SequenceLocation"),
            position=int_or_none(
                extract(inp, "@positionVCF"), field="SequenceLocation @positionVCF"
            ),
            reference=extract(inp, "@referenceAlleleVCF"),
            alternate=extract(inp, "@alternateAlleleVCF"),
        )

    def has_vcf_coordinates(self) -> bool:
        return (
            self.position is not None
            and self.reference is not None
            and self.alternate is not None
        )


@dataclasses.dataclass
class Location(Model):
    sequence_locations: list[SequenceLocation]

    @staticmethod
    def from_xml(inp: dict):
        return Location(
            sequence_locations=[
                SequenceLocation.from_xml(single(sl, "SequenceLocation"))
                for sl in ensure_list(extract(inp, "SequenceLocation") or [])
            ]
        )

    def for_assembly(self, assembly: str) -> SequenceLocation | None:
        """
        The first SequenceLocation on `assembly`. Later ones are ignored.
        """
        for sl in self.sequence_locations:
            if sl.assembly == assembly:
                return sl
        return None


@dataclasses.dataclass
class SimpleAllele(Model):
    allele_id: int
    variation_id: int
    location: Location | None

    @staticmethod
    def from_xml(inp: dict):
        raw_location = extract(inp, "Location")
        return SimpleAllele(
            allele_id=required_int(inp, "@AlleleID", "SimpleAllele"),
            variation_id=required_int(inp, "@VariationID", "SimpleAllele"),
            location=(
                Location.from_xml(single(raw_location, "Location"))
                if raw_location is not None
                else None
            ),
        )


@dataclasses.dataclass
class Haplotype(Model):
    variation_id: int
    simple_alleles: list[SimpleAllele]

    @staticmethod
    def from_xml(inp: dict):
        return Haplotype(
            variation_id=required_int(inp, "@VariationID", "Haplotype"),
            simple_alleles=[
                SimpleAllele.from_xml(single(sa, "SimpleAllele"))
                for sa in ensure_list(extract(inp, "SimpleAllele") or [])
            ],
        )


@dataclasses.dataclass
class Genotype(Model):
    variation_id: int | None
    simple_alleles: list[SimpleAllele]
    haplotypes: list[Haplotype]

    @staticmethod
    def from_xml(inp: dict):
        return Genotype(
            variation_id=int_or_none(
                extract(inp, "@VariationID"), field="Genotype @VariationID"
            ),
            simple_alleles=[
                SimpleAllele.from_xml(single(sa, "SimpleAllele"))
                for sa in ensure_list(extract(inp, "SimpleAllele") or [])
            ],
            haplotypes=[
                Haplotype.from_xml(single(h, "Haplotype"))
                for h in ensure_list(extract(inp, "Haplotype") or [])
            ],
        )


Variation = Union[SimpleAllele, Haplotype, Genotype]

VARIATION_TYPES: dict[str, type[Model]] = {
    "SimpleAllele": SimpleAllele,
    "Haplotype": Haplotype,
    "Genotype": Genotype,
}


def variation_from_xml(inp: dict) -> Variation | None:
    """
    Reads the single SimpleAllele, Haplotype or Genotype held by a
    ClassifiedRecord or IncludedRecord. Returns None if there is none.
    """
    present = [tag for tag in VARIATION_TYPES if tag in inp]
    if len(present) > 1:
        raise DecodeError(f"Variation types cannot coexist: {present}")
    if not present:
        return None
    tag = present[0]
    return VARIATION_TYPES[tag].from_xml(single(extract(inp, tag), tag))


@dataclasses.dataclass
class ClassifiedCondition(Model):
    """
    <ClassifiedCondition DB="MedGen" ID="C3150901">Spastic paraplegia 48</ClassifiedCondition>
    """

    db: str | None
    id: str | None
    name: str | None

    @staticmethod
    def from_xml(inp: dict):
        return ClassifiedCondition(
            db=extract(inp, "@DB"),
            id=extract(inp, "@ID"),
            name=text_of(inp),
        )


@dataclasses.dataclass
class RcvClassification(Model):
    statement_type: StatementType
    description: str
    submission_count: int

    @staticmethod
    def from_xml_single(inp: dict, statement_type: StatementType):
        """
        The input is a single classification node, e.g. the value of
        GermlineClassification. Returns None if it has no Description.

        <GermlineClassification>
            <ReviewStatus>criteria provided, single submitter</ReviewStatus>
            <Description SubmissionCount="1">Pathogenic</Description>
        </GermlineClassification>
        """
        raw_description = get(inp, "Description")
        if raw_description is None:
            return None
        if isinstance(raw_description, list):
            # Seen on some SomaticClinicalImpact nodes
            _logger.debug(
                f"Using the first of {len(raw_description)}"
                f" {statement_type} Descriptions"
            )
            raw_description = raw_description[0]
        raw_description = single(raw_description, "Description")
        return RcvClassification(
            statement_type=statement_type,
            description=text_of(raw_description) or "",
            submission_count=required_int(
                raw_description, "@SubmissionCount", "Description"
            ),
        )

    @staticmethod
    def from_xml(inp: dict):
        outputs: list[RcvClassification] = []
        for statement_type in StatementType:
            if statement_type.value in inp:
                classification = RcvClassification.from_xml_single(
                    single(inp[statement_type.value], statement_type.value),
                    statement_type,
                )
                if classification is not None:
                    outputs.append(classification)
        return outputs


@dataclasses.dataclass
class RcvAccession(Model):
    accession: str
    version: int | None
    title: str | None
    conditions: list[ClassifiedCondition]
    classifications: list[RcvClassification]

    @staticmethod
    def from_xml(inp: dict):
        """
        <RCVAccession Title="NM_014855.3(AP5Z1):c.80_83delinsTGCTGTAAACTGTAACTGTAAA AND Spastic paraplegia 48"
                      Accession="RCV000000012" Version="5">
            <ClassifiedConditionList TraitSetID="2">
                <ClassifiedCondition DB="MedGen" ID="C3150901">Spastic paraplegia 48</ClassifiedCondition>
            </ClassifiedConditionList>
            <RCVClassifications>
                <GermlineClassification>
                    <ReviewStatus>no assertion criteria provided</ReviewStatus>
                    <Description SubmissionCount="1">Pathogenic</Description>
                </GermlineClassification>
            </RCVClassifications>
        </RCVAccession>
        """
        raw_conditions = single(
            extract(inp, "ClassifiedConditionList"), "ClassifiedConditionList"
        )
        raw_classifications = single(
            extract(inp, "RCVClassifications"), "RCVClassifications"
        )
        return RcvAccession(
            accession=required(inp, "@Accession", "RCVAccession"),
            version=int_or_none(
                extract(inp, "@Version"), field="RCVAccession @Version"
            ),
            title=extract(inp, "@Title"),
            conditions=[
                ClassifiedCondition.from_xml(single(c, "ClassifiedCondition"))
                for c in ensure_list(
                    extract(raw_conditions, "ClassifiedCondition") or []
                )
            ],
            classifications=RcvClassification.from_xml(raw_classifications),
        )

    def classification(self, statement_type: StatementType) -> RcvClassification | None:
        for c in self.classifications:
            if c.statement_type == statement_type:
                return c
        return None


@dataclasses.dataclass
class ClassifiedRecord(Model):
    variation: Variation | None
    rcv_accessions: list[RcvAccession]

    @staticmethod
    def from_xml(inp: dict):
        raw_rcv_list = single(extract(inp, "RCVList"), "RCVList")
        return ClassifiedRecord(
            variation=variation_from_xml(inp),
            rcv_accessions=[
                RcvAccession.from_xml(single(r, "RCVAccession"))
                for r in ensure_list(extract(raw_rcv_list, "RCVAccession") or [])
            ],
        )


@dataclasses.dataclass
class IncludedRecord(Model):
    variation: Variation | None

    @staticmethod
    def from_xml(inp: dict):
        return IncludedRecord(variation=variation_from_xml(inp))


@dataclasses.dataclass
class VariationArchive(Model):
    variation_id: int
    accession: str
    classified_record: ClassifiedRecord | None
    included_record: IncludedRecord | None

    @staticmethod
    def from_xml(inp: dict):
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug(f"VariationArchive.from_xml(inp={json.dumps(inp)})")
        has_classified = "ClassifiedRecord" in inp
        raw_classified = extract(inp, "ClassifiedRecord")
        raw_included = extract(inp, "IncludedRecord")
        return VariationArchive(
            variation_id=required_int(inp, "@VariationID", "VariationArchive"),
            accession=required(inp, "@Accession", "VariationArchive"),
            classified_record=(
                ClassifiedRecord.from_xml(single(raw_classified, "ClassifiedRecord"))
                if has_classified
                else None
            ),
            included_record=(
                IncludedRecord.from_xml(single(raw_included, "IncludedRecord"))
                if raw_included is not None
                else None
            ),
        )
