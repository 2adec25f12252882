#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for SquigSim.

This module provides the main CLI entry point and subcommands for
generating simulated nanopore signals from DNA sequences.

Examples:
    squigsim seqgen reads.fa
    squigsim seqgen --raw --srate 3 reads.fa -o raw.txt
    squigsim seqgen --generate --num-sequences 5 --seq-length 100
    squigsim seqgen --generate --model dna_r10.4.1_e8.2_260bps --kmer-size 9
"""

import logging
import math
import sys
from pathlib import Path
from typing import List, Optional

import click
import yaml

from .version import __version__
from .config.parser import ConfigParser, ConfigValidationError
from .config.schema import TEMPLATES, load_config, save_config_template, validate_config
from .core.engine import SignalMode, SynthesisEngine
from .core.kmer_model_loader import load_kmer_model
from .core.seqgen_models import (
    ModelCache,
    ModelType,
    NeuralParams,
    get_model_type,
    get_seqgen_func,
)
from .core.sequence_utils import random_sequences
from .errors import SquigsimError
from .io.sequence_io import (
    SequenceRecord,
    read_sequences,
    write_fasta,
    write_signal_table,
    write_squiggle_table,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None):
    """Configure root logging for a CLI run."""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    log_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers)
    logging.getLogger().setLevel(log_level)


def _resolve_log_level(ctx, configured: str) -> str:
    if ctx.obj.get('VERBOSE'):
        return 'DEBUG'
    if ctx.obj.get('QUIET'):
        return 'ERROR'
    return configured


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    SquigSim: Nanopore Signal Simulator

    Synthesizes squiggle, raw and event signals from DNA sequences using
    k-mer current-level models.
    """
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet


# ============================================================================
# Signal Generation
# ============================================================================

def _generated_records(seq_length: int, num_sequences: int, seed: Optional[int],
                       prefix: str) -> List[SequenceRecord]:
    sequences = random_sequences(seq_length, num_sequences, seed)
    return [
        SequenceRecord(name=f"{prefix}generated_{i + 1:03d}", sequence=seq)
        for i, seq in enumerate(sequences)
    ]


@main.command('seqgen')
@click.argument('files', nargs=-1, type=click.Path())
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='YAML configuration file')
@click.option('--model', '-m', help="K-mer model name (e.g. 'dna_r10.4.1_e8.2_260bps')")
@click.option('--models-dir', '-d', help="K-mer models directory (default: 'kmer_models')")
@click.option('--kmer-size', '-k', type=click.IntRange(1, 9), help='K-mer size (default: 5)')
@click.option('--family', type=click.Choice(['squiggle_kmer', 'squiggle_r94',
                                            'squiggle_r94_rna', 'squiggle_r10']),
              help='Signal model family')
@click.option('--limit', '-l', type=click.IntRange(min=0),
              help='Maximum number of reads to process (0 is unlimited)')
@click.option('--output', '-o', type=click.Path(), help='Write to file rather than stdout')
@click.option('--prefix', '-p', help='Prefix prepended to the name of each read')
@click.option('--raw', '-r', is_flag=True, help='Generate raw signal from squiggle events')
@click.option('--event', '-e', is_flag=True, help='Generate event signal from squiggle')
@click.option('--srate', '-s', type=click.FloatRange(min=0, min_open=True),
              help='Sampling rate in kHz (default: 4.0)')
@click.option('--generate', '-g', is_flag=True,
              help='Generate synthetic sequences instead of reading from file')
@click.option('--seq-length', '-L', type=click.IntRange(min=1),
              help='Length of generated sequences in bases (default: 100)')
@click.option('--num-sequences', '-N', type=click.IntRange(min=1),
              help='Number of sequences to generate (default: 1)')
@click.option('--seed', '-S', type=int, help='Random seed for reproducible generation')
@click.option('--reference', '-R', type=click.Path(),
              help='Save processed sequences to a reference FASTA file')
@click.pass_context
def seqgen(ctx, files, config_file, model, models_dir, kmer_size, family, limit, output,
           prefix, raw, event, srate, generate, seq_length, num_sequences, seed, reference):
    """Generate squiggle, raw or event signals from DNA sequences."""
    mode = 'raw' if raw else ('event' if event else None)

    try:
        parser = ConfigParser(config_file)
        parser.merge_cli_overrides({
            'model.name': model,
            'model.models_dir': models_dir,
            'model.kmer_size': kmer_size,
            'model.family': family,
            'generate.limit': limit,
            'generate.prefix': prefix,
            'generate.seq_length': seq_length,
            'generate.num_sequences': num_sequences,
            'signal.mode': mode,
            'signal.sample_rate_khz': srate,
            'signal.seed': seed,
        })
        parser.validate()
    except (ConfigValidationError, FileNotFoundError) as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    setup_logging(_resolve_log_level(ctx, parser.get('logging.level')),
                  parser.get('logging.log_file'))

    if not generate and not files:
        raise click.UsageError("Provide input FASTA/FASTQ files or use --generate")

    model_type = get_model_type(parser.get('model.family'))
    try:
        get_seqgen_func(model_type)
    except SquigsimError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    kmer_params = parser.to_model_params()
    params = kmer_params if model_type is ModelType.KMER else NeuralParams(family=model_type)
    signal_mode = SignalMode(parser.get('signal.mode'))
    read_limit = parser.get('generate.limit')
    run_seed = parser.get('signal.seed')

    if generate:
        records = _generated_records(
            parser.get('generate.seq_length'),
            parser.get('generate.num_sequences'),
            run_seed,
            parser.get('generate.prefix'),
        )
        if read_limit:
            records = records[:read_limit]
    else:
        records = read_sequences(files, limit=read_limit)
        name_prefix = parser.get('generate.prefix')
        if name_prefix:
            records = (SequenceRecord(name_prefix + r.name, r.sequence) for r in records)

    engine = SynthesisEngine(cache=ModelCache(parser.get('cache.max_models')), seed=run_seed)

    processed: List[SequenceRecord] = []
    failed = 0
    total_dwell = 0.0
    total_positions = 0

    with click.open_file(output or '-', 'w') as out:
        for record in records:
            logger.debug(f"{record.name}: sequence length {record.length}")
            try:
                squiggle = engine.squiggle(record.sequence, params)
                signal = engine.render(squiggle, kmer_params, signal_mode)
            except SquigsimError as e:
                logger.warning(f"Skipping {record.name}: {e}")
                failed += 1
                continue

            processed.append(record)
            if signal_mode is SignalMode.SQUIGGLE:
                write_squiggle_table(out, record, squiggle)
                total_dwell += float(squiggle.view()[:, 2].sum())
                total_positions += squiggle.dim(0)
            else:
                write_signal_table(out, record, signal, f"{signal_mode.value}_value")

    if signal_mode is SignalMode.SQUIGGLE:
        if total_positions > 0:
            total_samples = math.ceil(total_dwell)
            logger.info(f"Average dwell time: {total_dwell / total_positions:.6f} "
                        f"(across {total_positions} positions and {total_samples} samples)")
        else:
            logger.info("No sequences processed - no dwell time data available")

    if reference:
        written = write_fasta(processed, reference)
        logger.info(f"Wrote {written} sequences to reference file: {reference}")

    logger.info(f"Processed {len(processed)} sequences ({failed} skipped)")

    if failed and not processed:
        click.echo(f"✗ All {failed} sequences failed", err=True)
        sys.exit(1)


# ============================================================================
# Model Inspection
# ============================================================================

@main.command('model-info')
@click.argument('model_name')
@click.option('--models-dir', '-d', default='kmer_models', show_default=True,
              help='K-mer models directory')
def model_info(model_name, models_dir):
    """Load a k-mer model and display its summary."""
    try:
        model = load_kmer_model(models_dir, model_name)
    except SquigsimError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    click.echo(model.summary())


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='squigsim_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t', type=click.Choice(TEMPLATES), default='default',
              help='Configuration template type')
def config_init(output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
        click.echo(f"✓ Configuration file created: {output}")
    except (OSError, ValueError) as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except (yaml.YAMLError, ValueError) as e:
        click.echo(f"✗ Error validating configuration: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")
    click.echo(f"  Model: {config['model']['name']} ({config['model']['kmer_size']}-mer)")
    click.echo(f"  Mode: {config['signal']['mode']} @ {config['signal']['sample_rate_khz']} kHz")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except (yaml.YAMLError, ValueError) as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        sys.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\nModel:")
    click.echo(f"  Family: {config['model']['family']}")
    click.echo(f"  Name: {config['model']['name']}")
    click.echo(f"  Directory: {config['model']['models_dir']}")
    click.echo(f"  K-mer size: {config['model']['kmer_size']}")

    click.echo("\nSignal:")
    click.echo(f"  Mode: {config['signal']['mode']}")
    click.echo(f"  Sample rate: {config['signal']['sample_rate_khz']} kHz")
    click.echo(f"  Seed: {config['signal']['seed']}")

    click.echo("\nGeneration:")
    click.echo(f"  Sequence length: {config['generate']['seq_length']}")
    click.echo(f"  Sequences: {config['generate']['num_sequences']}")


if __name__ == '__main__':
    main()
