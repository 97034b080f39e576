from __future__ import annotations

import textwrap

import pytest


@pytest.fixture
def gff_dup_locus(tmp_path):
    """
    miniprot-like GFF3 with one duplicated locus and two unique ones.

    chr1 100..200 : MP1 (QA, 100 aa @ 90%  -> score 90)
                    MP2 (QB, 100 aa @ 70%  -> score 70), same CDS as MP1
    chr1 500..600 : MP3 (QC, 50 aa @ 80%   -> score 40)
    chr2          : MP4 (QD, 80 aa @ 95%   -> score 76)

    Expected survivors: MP1, MP3, MP4.
    """
    gff = textwrap.dedent("""\
        ##gff-version 3
        ##PAF\tQA\t100\t0\t100\t+\tchr1\t10000\t99\t200\t270\t300\t0\tAS:i:400\tms:i:400\tnp:i:95\tcg:Z:100M\tcs:Z::90*ab:10
        chr1\tminiprot\tmRNA\t100\t200\t400\t+\t.\tID=MP1;Rank=1;Identity=0.9000;Positive=0.9500;Target=QA 1 100
        chr1\tminiprot\tCDS\t100\t150\t400\t+\t0\tParent=MP1;Rank=1;Identity=0.9000;Target=QA 1 51
        chr1\tminiprot\tCDS\t160\t200\t400\t+\t0\tParent=MP1;Rank=1;Identity=0.9000;Target=QA 52 100
        chr1\tminiprot\tstop_codon\t201\t203\t0\t+\t0\tParent=MP1;Rank=1
        ##PAF\tQB\t100\t0\t100\t+\tchr1\t10000\t99\t200\t210\t300\t0\tAS:i:300\tms:i:300\tnp:i:80\tcg:Z:100M\tcs:Z::70*ab:30
        chr1\tminiprot\tmRNA\t100\t200\t300\t+\t.\tID=MP2;Rank=2;Identity=0.7000;Positive=0.8000;Target=QB 1 100
        chr1\tminiprot\tCDS\t100\t150\t300\t+\t0\tParent=MP2;Rank=2;Identity=0.7000;Target=QB 1 51
        chr1\tminiprot\tCDS\t160\t200\t300\t+\t0\tParent=MP2;Rank=2;Identity=0.7000;Target=QB 52 100
        ##PAF\tQC\t50\t0\t50\t-\tchr1\t10000\t499\t600\t120\t150\t0\tAS:i:150\tms:i:150\tnp:i:45\tcg:Z:50M\tcs:Z::40*ab:10
        chr1\tminiprot\tmRNA\t500\t600\t150\t-\t.\tID=MP3;Rank=1;Identity=0.8000;Positive=0.9000;Target=QC 1 50
        chr1\tminiprot\tCDS\t500\t600\t150\t-\t0\tParent=MP3;Rank=1;Identity=0.8000;Target=QC 1 50
        ##PAF\tQD\t80\t0\t80\t+\tchr2\t10000\t999\t1300\t228\t240\t0\tAS:i:300\tms:i:300\tnp:i:78\tcg:Z:80M\tcs:Z::76*ab:4
        chr2\tminiprot\tmRNA\t1000\t1300\t300\t+\t.\tID=MP4;Rank=1;Identity=0.9500;Positive=0.9700;Target=QD 1 80
        chr2\tminiprot\tCDS\t1000\t1300\t300\t+\t0\tParent=MP4;Rank=1;Identity=0.9500;Target=QD 1 80
    """)
    p = tmp_path / 'dup_locus.gff3'
    p.write_text(gff, encoding='utf-8')
    return p


@pytest.fixture
def gff_missing_cds(tmp_path):
    """One usable mRNA and one mRNA with no CDS children."""
    gff = textwrap.dedent("""\
        ##gff-version 3
        chr3\tminiprot\tmRNA\t10\t90\t100\t+\t.\tID=MP_ok;Rank=1;Identity=1.0000;Target=QE 1 27
        chr3\tminiprot\tCDS\t10\t90\t100\t+\t0\tParent=MP_ok
        chr3\tminiprot\tmRNA\t300\t400\t100\t+\t.\tID=MP_bare;Rank=1;Identity=1.0000;Target=QF 1 30
    """)
    p = tmp_path / 'missing_cds.gff3'
    p.write_text(gff, encoding='utf-8')
    return p
