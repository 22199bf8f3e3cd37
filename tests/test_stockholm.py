import textwrap
from pathlib import Path

import pytest

from rnamotif.errors import MissingAnnotationKey
from rnamotif.stockholm import parse_stockholm, read_stockholm, ungap


def _lines(text: str) -> list[str]:
    return textwrap.dedent(text).splitlines(keepends=True)


def test_ungap() -> None:
    assert ungap("GG-A.C_U~") == "GGACU"


def test_read_fixture_records(seeds_sto_path: Path) -> None:
    records = read_stockholm(seeds_sto_path)
    assert len(records) == 3

    first, second, third = records
    assert first.header["AC"] == "RF99901"
    assert first.header["ID"] == "toy-hairpin"
    assert first.names == ("seq1", "seq2")
    assert first.alignment == ("GGGAAACCC", "GGGAAACCC")
    assert first.column_value("SS_cons") == "<<<___>>>"
    assert first.width == 9

    assert second.header["DE"] == "Toy stem with gapped members"
    assert second.representative_length() == 11
    assert second.width == 12

    assert "AC" not in third.header
    with pytest.raises(MissingAnnotationKey):
        third.header_value("AC")


def test_interleaved_blocks_concatenate() -> None:
    text = """\
        # STOCKHOLM 1.0
        #=GF ID   blocks

        a    GGGA
        b    GGGA
        #=GC SS_cons <<<_

        a    AACCC
        b    AACCC
        #=GC SS_cons __>>>
        //
        """
    (rec,) = parse_stockholm(_lines(text))
    assert rec.sequences == {"a": "GGGAAACCC", "b": "GGGAAACCC"}
    assert rec.column_value("SS_cons") == "<<<___>>>"


def test_missing_terminator_tolerated() -> None:
    text = """\
        # STOCKHOLM 1.0
        #=GF AC   RF00001
        s1   ACGU
        """
    (rec,) = parse_stockholm(_lines(text))
    assert rec.header_value("AC") == "RF00001"


def test_other_markup_ignored() -> None:
    text = """\
        # STOCKHOLM 1.0
        #=GS s1 DE some sequence
        #=GR s1 PP 9999
        # free text comment
        s1   ACGU
        //
        """
    (rec,) = parse_stockholm(_lines(text))
    assert rec.header == {}
    assert rec.column_annotation == {}
    assert rec.alignment == ("ACGU",)


def test_width_mismatch_raises() -> None:
    text = """\
        # STOCKHOLM 1.0
        s1   ACGU
        s2   ACG
        //
        """
    with pytest.raises(ValueError):
        parse_stockholm(_lines(text))


def test_track_width_mismatch_raises() -> None:
    text = """\
        # STOCKHOLM 1.0
        s1   ACGU
        #=GC SS_cons <>
        //
        """
    with pytest.raises(ValueError):
        parse_stockholm(_lines(text))


def test_missing_column_annotation_raises() -> None:
    (rec,) = parse_stockholm(_lines("s1  ACGU\n//\n"))
    with pytest.raises(MissingAnnotationKey):
        rec.column_value("SS_cons")


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_stockholm(tmp_path / "absent.sto")
