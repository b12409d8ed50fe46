import pytest

from clinvar_vcf.errors import DecodeError
from clinvar_vcf.model.variation_archive import (
    ClassifiedCondition,
    Genotype,
    Haplotype,
    Location,
    RcvAccession,
    RcvClassification,
    SequenceLocation,
    SimpleAllele,
    StatementType,
    VariationArchive,
    variation_from_xml,
)
from clinvar_vcf.reader import _parse_xml_document


def _contents(xml: str) -> dict:
    """
    The dict of the root element of `xml`.
    """
    return list(_parse_xml_document(xml).values())[0]


def test_sequence_location():
    sl = SequenceLocation.from_xml(
        _contents(
            '<SequenceLocation Assembly="GRCh38" Chr="7" Accession="NC_000007.14"'
            ' start="4781213" stop="4781216" positionVCF="4781213"'
            ' referenceAlleleVCF="GGAT" alternateAlleleVCF="TGCTGTAAACTGTAACTGTAAA"/>'
        )
    )
    assert sl.assembly == "GRCh38"
    assert sl.chromosome == "7"
    assert sl.position == 4781213
    assert sl.reference == "GGAT"
    assert sl.alternate == "TGCTGTAAACTGTAACTGTAAA"
    assert sl.has_vcf_coordinates()

    partial = SequenceLocation.from_xml(
        _contents('<SequenceLocation Assembly="GRCh38" Chr="7" positionVCF="10"/>')
    )
    assert partial.reference is None
    assert not partial.has_vcf_coordinates()

    with pytest.raises(DecodeError):
        SequenceLocation.from_xml(_contents('<SequenceLocation Assembly="GRCh38"/>'))
    with pytest.raises(DecodeError):
        SequenceLocation.from_xml(
            _contents('<SequenceLocation Assembly="GRCh38" Chr="1" positionVCF="1e3"/>')
        )


def test_location_for_assembly():
    location = Location.from_xml(
        _contents(
            """<Location>
              <CytogeneticLocation>7p22.1</CytogeneticLocation>
              <SequenceLocation Assembly="GRCh37" Chr="7" positionVCF="1" referenceAlleleVCF="A" alternateAlleleVCF="C"/>
              <SequenceLocation Assembly="GRCh38" Chr="7" positionVCF="2" referenceAlleleVCF="A" alternateAlleleVCF="C"/>
              <SequenceLocation Assembly="GRCh38" Chr="7" positionVCF="3" referenceAlleleVCF="A" alternateAlleleVCF="C"/>
            </Location>"""
        )
    )
    assert len(location.sequence_locations) == 3
    assert location.for_assembly("GRCh37").position == 1
    # The first one wins
    assert location.for_assembly("GRCh38").position == 2
    assert location.for_assembly("NCBI36") is None

    assert Location.from_xml({}).sequence_locations == []


def test_variation_from_xml_shapes():
    simple = variation_from_xml(
        _contents(
            '<ClassifiedRecord><SimpleAllele AlleleID="1" VariationID="2"/></ClassifiedRecord>'
        )
    )
    assert isinstance(simple, SimpleAllele)
    assert (simple.allele_id, simple.variation_id) == (1, 2)

    haplotype = variation_from_xml(
        _contents(
            """<ClassifiedRecord>
              <Haplotype VariationID="3">
                <SimpleAllele AlleleID="31" VariationID="32"/>
                <SimpleAllele AlleleID="33" VariationID="34"/>
              </Haplotype>
            </ClassifiedRecord>"""
        )
    )
    assert isinstance(haplotype, Haplotype)
    assert haplotype.variation_id == 3
    assert [sa.allele_id for sa in haplotype.simple_alleles] == [31, 33]

    genotype = variation_from_xml(
        _contents(
            """<ClassifiedRecord>
              <Genotype VariationID="4">
                <SimpleAllele AlleleID="41" VariationID="42"/>
                <Haplotype VariationID="43">
                  <SimpleAllele AlleleID="44" VariationID="45"/>
                </Haplotype>
              </Genotype>
            </ClassifiedRecord>"""
        )
    )
    assert isinstance(genotype, Genotype)
    assert genotype.variation_id == 4
    assert [sa.allele_id for sa in genotype.simple_alleles] == [41]
    assert [h.variation_id for h in genotype.haplotypes] == [43]
    assert genotype.haplotypes[0].simple_alleles[0].allele_id == 44

    assert variation_from_xml({}) is None


def test_variation_types_cannot_coexist():
    inp = _contents(
        """<ClassifiedRecord>
          <SimpleAllele AlleleID="1" VariationID="2"/>
          <Haplotype VariationID="3"/>
        </ClassifiedRecord>"""
    )
    with pytest.raises(DecodeError):
        variation_from_xml(inp)


def test_simple_allele_required_attributes():
    with pytest.raises(DecodeError):
        SimpleAllele.from_xml(_contents('<SimpleAllele VariationID="2"/>'))
    with pytest.raises(DecodeError):
        SimpleAllele.from_xml(_contents('<SimpleAllele AlleleID="1"/>'))
    with pytest.raises(DecodeError):
        Haplotype.from_xml(_contents("<Haplotype><SimpleAllele/></Haplotype>"))


def test_classified_condition():
    c = ClassifiedCondition.from_xml(
        _contents('<ClassifiedCondition DB="MedGen" ID="C3150901">Spastic paraplegia 48</ClassifiedCondition>')
    )
    assert (c.db, c.id, c.name) == ("MedGen", "C3150901", "Spastic paraplegia 48")

    c = ClassifiedCondition.from_xml(
        _contents("<ClassifiedCondition>not provided</ClassifiedCondition>")
    )
    assert (c.db, c.id, c.name) == (None, None, "not provided")

    c = ClassifiedCondition.from_xml(
        _contents('<ClassifiedCondition DB="MedGen" ID="">unnamed</ClassifiedCondition>')
    )
    assert c.id == ""


def test_rcv_classifications():
    classifications = RcvClassification.from_xml(
        _contents(
            """<RCVClassifications>
              <GermlineClassification>
                <ReviewStatus>criteria provided, single submitter</ReviewStatus>
                <Description SubmissionCount="1">Pathogenic</Description>
              </GermlineClassification>
              <SomaticClinicalImpact>
                <ReviewStatus>criteria provided, single submitter</ReviewStatus>
                <Description SubmissionCount="2" ClinicalImpactAssertionType="diagnostic">Tier I - Strong</Description>
                <Description SubmissionCount="1" ClinicalImpactAssertionType="prognostic">Tier II - Potential</Description>
              </SomaticClinicalImpact>
              <OncogenicityClassification>
                <ReviewStatus>no classification provided</ReviewStatus>
              </OncogenicityClassification>
            </RCVClassifications>"""
        )
    )
    assert [(c.statement_type, c.description, c.submission_count) for c in classifications] == [
        (StatementType.GermlineClassification, "Pathogenic", 1),
        (StatementType.SomaticClinicalImpact, "Tier I - Strong", 2),
    ]

    with pytest.raises(DecodeError):
        RcvClassification.from_xml(
            _contents(
                "<RCVClassifications><GermlineClassification>"
                "<Description>Pathogenic</Description>"
                "</GermlineClassification></RCVClassifications>"
            )
        )


def test_rcv_accession():
    rcv = RcvAccession.from_xml(
        _contents(
            """<RCVAccession Title="NM_014855.3(AP5Z1):c.80_83delinsTGCTGTAAACTGTAACTGTAAA AND Spastic paraplegia 48"
                          Accession="RCV000000012" Version="5">
              <ClassifiedConditionList TraitSetID="2">
                <ClassifiedCondition DB="MedGen" ID="C3150901">Spastic paraplegia 48</ClassifiedCondition>
                <ClassifiedCondition DB="OMIM" ID="613647">Spastic paraplegia 48</ClassifiedCondition>
              </ClassifiedConditionList>
              <RCVClassifications>
                <GermlineClassification>
                  <ReviewStatus>no assertion criteria provided</ReviewStatus>
                  <Description SubmissionCount="1">Pathogenic</Description>
                </GermlineClassification>
              </RCVClassifications>
            </RCVAccession>"""
        )
    )
    assert rcv.accession == "RCV000000012"
    assert rcv.version == 5
    assert rcv.title.endswith("AND Spastic paraplegia 48")
    assert [(c.db, c.id) for c in rcv.conditions] == [
        ("MedGen", "C3150901"),
        ("OMIM", "613647"),
    ]
    assert rcv.classification(StatementType.GermlineClassification).description == "Pathogenic"
    assert rcv.classification(StatementType.SomaticClinicalImpact) is None

    bare = RcvAccession.from_xml(_contents('<RCVAccession Accession="RCV1"/>'))
    assert bare.conditions == []
    assert bare.classifications == []
    assert bare.version is None

    with pytest.raises(DecodeError):
        RcvAccession.from_xml(_contents('<RCVAccession Title="no accession"/>'))


def test_variation_archive_records():
    archive = VariationArchive.from_xml(
        _contents(
            """<VariationArchive VariationID="2" Accession="VCV000000002">
              <ClassifiedRecord/>
            </VariationArchive>"""
        )
    )
    assert archive.classified_record is not None
    assert archive.classified_record.variation is None
    assert archive.classified_record.rcv_accessions == []
    assert archive.included_record is None

    archive = VariationArchive.from_xml(
        _contents(
            """<VariationArchive VariationID="3" Accession="VCV000000003">
              <IncludedRecord>
                <SimpleAllele AlleleID="30" VariationID="3"/>
              </IncludedRecord>
            </VariationArchive>"""
        )
    )
    assert archive.classified_record is None
    assert archive.included_record.variation.allele_id == 30


@pytest.mark.parametrize("value", ["-5", "+7", " 100", "100 ", "1_000", "", "٣"])
def test_numeric_attributes_are_unsigned_digits(value):
    with pytest.raises(DecodeError):
        SequenceLocation.from_xml(
            {"@Assembly": "GRCh38", "@Chr": "1", "@positionVCF": value}
        )
    with pytest.raises(DecodeError):
        SimpleAllele.from_xml({"@AlleleID": value, "@VariationID": "2"})
    with pytest.raises(DecodeError):
        SimpleAllele.from_xml({"@AlleleID": "1", "@VariationID": value})
    with pytest.raises(DecodeError):
        VariationArchive.from_xml({"@VariationID": value, "@Accession": "VCV1"})


def test_numeric_attributes_leading_zeros():
    sl = SequenceLocation.from_xml(
        {"@Assembly": "GRCh38", "@Chr": "1", "@positionVCF": "0100"}
    )
    assert sl.position == 100
