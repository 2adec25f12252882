#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Tests for the k-mer model loader.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

import io

import numpy as np
import pytest

from squigsim.core.kmer_model_loader import (
    MODERN_DEFAULT_STDDEV,
    find_model_file,
    load_kmer_model,
    parse_kmer_model,
)
from squigsim.errors import ModelNotFoundError, ModelParseError

from conftest import (
    LEGACY_MODEL,
    MODERN_MODEL,
    all_kmers,
    legacy_level,
    legacy_stddev,
    modern_level,
    write_modern_model,
)


def _modern_text(k, level=float):
    return ''.join(f"{kmer} {level(i)}\n" for i, kmer in enumerate(all_kmers(k)))


class TestModelLookup:
    """Test model file discovery."""

    def test_finds_modern_file(self, models_dir):
        path = find_model_file(models_dir, MODERN_MODEL)

        assert path.name == "5mer_levels_v1.txt"

    def test_nested_model_name(self, models_dir):
        path = find_model_file(models_dir, LEGACY_MODEL)

        assert path.name == "template_median68pA.model"

    def test_candidate_order(self, tmp_path):
        """The 9-mer filename is preferred over the 5-mer one."""
        write_modern_model(tmp_path, "both", 1, float, filename="5mer_levels_v1.txt")
        write_modern_model(tmp_path, "both", 2, float, filename="9mer_levels_v1.txt")

        assert find_model_file(tmp_path, "both").name == "9mer_levels_v1.txt"

    def test_missing_model(self, models_dir):
        with pytest.raises(ModelNotFoundError, match="Could not find k-mer model"):
            find_model_file(models_dir, "no_such_model")


class TestModernFormat:
    """Test the headerless two-column format."""

    def test_load_modern(self, models_dir):
        model = load_kmer_model(models_dir, MODERN_MODEL)

        assert model.kmer_size == 5
        assert model.num_kmers == 1024
        assert model.level_mean.dtype == np.float32
        assert len(model.level_mean) == 1024
        assert not model.is_legacy
        assert model.source_path.name == "5mer_levels_v1.txt"

    def test_modern_values_in_order(self, models_dir):
        model = load_kmer_model(models_dir, MODERN_MODEL)

        for index in (0, 1, 63, 64, 1023):
            assert model.level_mean[index] == pytest.approx(modern_level(index))

    def test_modern_default_stddev(self, models_dir):
        model = load_kmer_model(models_dir, MODERN_MODEL)

        assert model.level_stddev is None
        assert not model.has_stddev
        assert model.default_stddev == MODERN_DEFAULT_STDDEV
        assert model.stddev_for(17) == 1.5

    def test_blank_lines_ignored(self):
        text = "\n" + _modern_text(2).replace("\n", "\n\n")

        model = parse_kmer_model(io.StringIO(text), "blank")

        assert model.num_kmers == 16
        assert model.level_mean[15] == 15.0

    def test_missing_rows(self):
        text = ''.join(_modern_text(2).splitlines(keepends=True)[:15])

        with pytest.raises(ModelParseError, match="Expected 16 k-mers, found 15"):
            parse_kmer_model(io.StringIO(text), "short")

    def test_extra_rows(self):
        text = _modern_text(2) + "TT 1.0\n"

        with pytest.raises(ModelParseError, match="Expected 16 k-mers, found 17"):
            parse_kmer_model(io.StringIO(text), "long")

    def test_kmer_too_long(self):
        with pytest.raises(ModelParseError):
            parse_kmer_model(io.StringIO("ACGTACGTAC 80.0\n"), "ten")

    def test_non_numeric_level(self):
        text = _modern_text(1).replace("C 1.0", "C abc")

        with pytest.raises(ModelParseError, match="Non-numeric"):
            parse_kmer_model(io.StringIO(text), "bad")

    def test_empty_file(self):
        with pytest.raises(ModelParseError, match="Empty"):
            parse_kmer_model(io.StringIO("\n\n"), "empty")


class TestLegacyFormat:
    """Test the headered multi-column format."""

    def test_load_legacy(self, models_dir):
        model = load_kmer_model(models_dir, LEGACY_MODEL)

        assert model.is_legacy
        assert model.kmer_size == 3
        assert model.default_stddev == 0.0
        assert model.has_stddev

    def test_legacy_columns(self, models_dir):
        model = load_kmer_model(models_dir, LEGACY_MODEL)

        assert model.level_mean[5] == pytest.approx(legacy_level(5))
        assert model.level_stddev[6] == pytest.approx(legacy_stddev(6))
        assert model.sd_mean[0] == pytest.approx(0.8)
        assert model.sd_stdv[0] == pytest.approx(0.1)
        assert model.ig_lambda[0] == pytest.approx(7.0)
        assert model.weight[63] == pytest.approx(163.0)

    def test_three_column_legacy(self):
        """Optional columns may be absent; they are still allocated as zeros."""
        rows = ''.join(f"{kmer}\t{60 + i}\t2.0\n" for i, kmer in enumerate(all_kmers(1)))
        text = "kmer\tlevel_mean\tlevel_stdv\n" + rows

        model = parse_kmer_model(io.StringIO(text), "three")

        assert model.level_stddev.tolist() == [2.0] * 4
        assert model.weight.tolist() == [0.0] * 4

    def test_too_few_columns(self):
        text = "kmer\tlevel_mean\tlevel_stdv\nA\t60.0\nC\t61.0\t1.0\nG\t62.0\t1.0\nT\t63.0\t1.0\n"

        with pytest.raises(ModelParseError, match="columns"):
            parse_kmer_model(io.StringIO(text), "narrow")

    def test_header_only(self):
        with pytest.raises(ModelParseError, match="No data after header"):
            parse_kmer_model(io.StringIO("kmer\tlevel_mean\tlevel_stdv\n"), "header")

    def test_summary_mentions_format(self, models_dir):
        summary = load_kmer_model(models_dir, LEGACY_MODEL).summary()

        assert "legacy format" in summary
        assert "64 k-mers" in summary


class TestMalformedFiles:
    """Test files that are not readable text."""

    def test_invalid_utf8(self, tmp_path):
        model_dir = tmp_path / "corrupt"
        model_dir.mkdir()
        (model_dir / "5mer_levels_v1.txt").write_bytes(b"A\t60.0\nC\t\xff\xfe\nG\t62.0\nT\t63.0\n")

        with pytest.raises(ModelParseError, match="not valid text") as exc_info:
            load_kmer_model(tmp_path, "corrupt")
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_binary_stream(self):
        handle = io.TextIOWrapper(io.BytesIO(b"\xff\xfe\x00\x01"), encoding='utf-8')

        with pytest.raises(ModelParseError):
            parse_kmer_model(handle, "binary")

# SquigSim v0.1.0
# Any usage is subject to this software's license.
