#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SquigSim v0.1.0

Tests for the command-line interface.

Author: SquigSim Development Team
License: MIT License - See LICENSE
"""

import logging
import re

import pytest
from click.testing import CliRunner

from squigsim.cli import main

from conftest import LEGACY_MODEL, MODERN_MODEL

DATA_LINE = re.compile(r"^\d+\t")


def _blocks(output):
    """Split table output into {read_name: [data lines]}."""
    blocks = {}
    current = None
    for line in output.splitlines():
        if line.startswith('#'):
            current = line[1:]
            blocks[current] = []
        elif current is not None and DATA_LINE.match(line):
            blocks[current].append(line)
    return blocks


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self):
        """Test that --help runs without error."""
        runner = CliRunner()
        result = runner.invoke(main, ['--help'])

        assert result.exit_code == 0
        assert 'SquigSim' in result.output

    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ['--version'])

        assert result.exit_code == 0
        assert '0.1.0' in result.output

    def test_seqgen_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', '--help'])

        assert result.exit_code == 0
        assert '--srate' in result.output

    def test_invalid_command(self):
        runner = CliRunner()
        result = runner.invoke(main, ['nonexistent_command'])

        assert result.exit_code != 0


class TestSeqgenCommand:
    """Test signal generation from files and synthetic sequences."""

    def test_missing_input(self):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen'])

        assert result.exit_code != 0
        assert '--generate' in result.output

    def test_squiggle_output(self, models_dir, simple_fasta):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir)])

        assert result.exit_code == 0, result.output
        assert 'pos\tbase\tcurrent\tsd\tdwell' in result.output
        blocks = _blocks(result.output)
        assert len(blocks['read1']) == 8
        assert len(blocks['read2']) == 10
        assert blocks['read1'][0].split('\t')[4] == '10.000000'

    def test_event_output(self, models_dir, simple_fasta):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir), '--event'])

        assert result.exit_code == 0, result.output
        assert 'sample_index\tevent_value' in result.output
        assert len(_blocks(result.output)['read1']) == 80

    def test_raw_output_seeded(self, models_dir, simple_fasta):
        runner = CliRunner()
        args = ['seqgen', str(simple_fasta), '-d', str(models_dir), '--raw', '--seed', '7']

        first = runner.invoke(main, args)
        second = runner.invoke(main, args)

        assert first.exit_code == 0, first.output
        assert 'sample_index\traw_value' in first.output
        assert _blocks(first.output) == _blocks(second.output)

    def test_sample_rate(self, models_dir, simple_fasta):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir),
                                      '--event', '--srate', '5'])

        assert result.exit_code == 0, result.output
        # dwell 12.5 at 5 kHz -> ceil(15.625) samples per event
        assert len(_blocks(result.output)['read1']) == 8 * 16

    def test_generate(self, models_dir):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', '--generate', '-N', '3', '-L', '20',
                                      '--seed', '5', '-d', str(models_dir)])

        assert result.exit_code == 0, result.output
        blocks = _blocks(result.output)
        assert list(blocks) == ['generated_001', 'generated_002', 'generated_003']
        assert all(len(rows) == 16 for rows in blocks.values())

    def test_prefix_and_limit(self, models_dir, simple_fasta):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir),
                                      '--prefix', 'sim_', '--limit', '1'])

        assert result.exit_code == 0, result.output
        assert list(_blocks(result.output)) == ['sim_read1']

    def test_output_and_reference_files(self, models_dir, simple_fasta, tmp_path):
        output = tmp_path / "squiggle.tsv"
        reference = tmp_path / "ref.fa"
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir),
                                      '-o', str(output), '-R', str(reference)])

        assert result.exit_code == 0, result.output
        assert '#read1' in output.read_text()
        assert reference.read_text().startswith(">read1\nACGTACGTACGT\n")

    def test_legacy_model(self, models_dir, simple_fasta):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir),
                                      '-m', LEGACY_MODEL, '-k', '3'])

        assert result.exit_code == 0, result.output
        assert len(_blocks(result.output)['read1']) == 10

    def test_short_sequence_skipped(self, models_dir, tmp_path):
        path = tmp_path / "mixed.fa"
        path.write_text(">tiny\nACG\n>ok\nACGTACGT\n")
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(path), '-d', str(models_dir)])

        assert result.exit_code == 0, result.output
        assert list(_blocks(result.output)) == ['ok']

    def test_missing_model_fails(self, tmp_path, simple_fasta):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(tmp_path),
                                      '-m', 'nonexistent'])

        assert result.exit_code == 1

    def test_upscale_fails(self, models_dir, simple_fasta):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir),
                                      '-m', MODERN_MODEL, '-k', '7'])

        assert result.exit_code == 1

    def test_neural_family_fails(self, models_dir, simple_fasta):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir),
                                      '--family', 'squiggle_r10'])

        assert result.exit_code == 1

    @pytest.mark.parametrize("args", [['-k', '12'], ['--srate', '0']])
    def test_invalid_options(self, models_dir, simple_fasta, args):
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir)] + args)

        assert result.exit_code == 2

    def test_config_file(self, models_dir, simple_fasta, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text(f"model:\n  models_dir: {models_dir}\nsignal:\n  mode: event\n")
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-c', str(config)])

        assert result.exit_code == 0, result.output
        assert 'event_value' in result.output

    def test_invalid_config_file(self, simple_fasta, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("model:\n  kmer_size: 42\n")
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-c', str(config)])

        assert result.exit_code == 1
        assert 'kmer_size' in result.output


class TestModelInfoCommand:
    """Test model inspection."""

    def test_model_info(self, models_dir):
        runner = CliRunner()
        result = runner.invoke(main, ['model-info', MODERN_MODEL, '-d', str(models_dir)])

        assert result.exit_code == 0
        assert '1024 k-mers' in result.output
        assert 'Default stddev: 1.5' in result.output

    def test_model_info_missing(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ['model-info', 'nonexistent', '-d', str(tmp_path)])

        assert result.exit_code == 1


class TestConfigCommands:
    """Test configuration management commands."""

    def test_config_init(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            result = runner.invoke(main, ['config', 'init', '--output', 'test_config.yaml'])

            assert result.exit_code == 0
            assert 'Configuration file created' in result.output

    def test_config_init_then_validate(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            runner.invoke(main, ['config', 'init', '-o', 'r10.yaml', '-t', 'r10_dna'])
            result = runner.invoke(main, ['config', 'validate', 'r10.yaml'])

            assert result.exit_code == 0
            assert 'dna_r10.4.1_e8.2_260bps (9-mer)' in result.output

    def test_config_validate_invalid(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            with open('bad.yaml', 'w') as f:
                f.write("signal:\n  mode: fast5\n")
            result = runner.invoke(main, ['config', 'validate', 'bad.yaml'])

            assert result.exit_code == 1

    def test_config_show(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            runner.invoke(main, ['config', 'init', '-o', 'c.yaml', '-t', 'legacy'])
            summary = runner.invoke(main, ['config', 'show', 'c.yaml'])
            dumped = runner.invoke(main, ['config', 'show', 'c.yaml', '-f', 'yaml'])

            assert summary.exit_code == 0
            assert 'K-mer size: 6' in summary.output
            assert 'kmer_size: 6' in dumped.output


class TestSeqgenLogging:
    """Test run summaries written to the log."""

    def test_average_dwell_summary(self, models_dir, simple_fasta, caplog):
        caplog.set_level(logging.INFO)
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(models_dir)])

        assert result.exit_code == 0, result.output
        # 8 + 10 positions, 10 samples each at 4 kHz
        assert ("Average dwell time: 10.000000 (across 18 positions and 180 samples)"
                in caplog.text)

    def test_corrupt_model_skips_reads(self, tmp_path, simple_fasta):
        model_dir = tmp_path / "corrupt"
        model_dir.mkdir()
        (model_dir / "5mer_levels_v1.txt").write_bytes(b"\xff\xfe\x00")
        runner = CliRunner()
        result = runner.invoke(main, ['seqgen', str(simple_fasta), '-d', str(tmp_path),
                                      '-m', 'corrupt'])

        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert 'All 2 sequences failed' in result.output

# SquigSim v0.1.0
# Any usage is subject to this software's license.
