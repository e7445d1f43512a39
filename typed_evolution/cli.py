"""
typed_evolution/cli.py - Command-line interface
"""
import os
import sys
import time

import click

from .config import EngineSettings
from .evaluator import RENDERABLE_FAMILIES, Evaluator
from .genome import IMAGE_CHANNELS, Genome
from .logging_config import configure_logging
from .tree import GenomeValidationError


def load_settings(settings_file, **overrides) -> EngineSettings:
    """Settings file (if any), then environment, then command-line overrides"""
    base = EngineSettings.from_json(filename=settings_file).to_dict() if settings_file else {}
    env = EngineSettings.from_env().to_dict()
    merged = dict(base)
    for key, value in env.items():
        if value != EngineSettings.DEFAULTS[key]:
            merged[key] = value
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return EngineSettings.from_dict(merged)


def parse_channels(specs):
    if not specs:
        return dict(IMAGE_CHANNELS)
    channels = {}
    for spec in specs:
        name, sep, family = spec.partition('=')
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=FAMILY, got {spec!r}", param_hint='--channel')
        if family not in RENDERABLE_FAMILIES:
            raise click.BadParameter(
                f"family {family!r} cannot be rendered (choose from {', '.join(RENDERABLE_FAMILIES)})",
                param_hint='--channel')
        channels[name] = family
    return channels


def load_genome(path) -> Genome:
    try:
        return Genome.from_json(filename=path)
    except (OSError, GenomeValidationError) as e:
        click.echo(f"Error loading genome: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging')
def cli(verbose):
    """Typed Evolution - typed expression trees for generative visuals"""
    configure_logging(verbose)


@cli.command()
@click.option('--out', '-o', required=True, help='Output genome JSON file')
@click.option('--seed', type=int, help='RNG seed')
@click.option('--max-depth', type=int, help='Depth budget for generation')
@click.option('--channel', 'channels', multiple=True, help='Channel as NAME=FAMILY (repeatable)')
@click.option('--settings', 'settings_file', type=click.Path(exists=True), help='Settings JSON file')
def generate(out, seed, max_depth, channels, settings_file):
    """Generate a random genome"""
    settings = load_settings(settings_file, seed=seed, max_depth=max_depth)
    genome = Genome.random(settings, channels=parse_channels(channels))
    genome.to_json(out)
    click.echo(f"Generated genome: complexity {genome.get_complexity()}, depth {genome.get_depth()}")
    click.echo(f"Saved: {out}")


@cli.command()
@click.option('--genome', '-g', 'genome_path', required=True, help='Path to genome JSON file')
@click.option('--out', '-o', help='Output file (defaults to overwriting the input)')
@click.option('--seed', type=int, help='RNG seed')
@click.option('--probability', '-p', type=float, help='Per-node mutation probability')
@click.option('--rounds', default=1, help='Number of mutation passes')
@click.option('--settings', 'settings_file', type=click.Path(exists=True), help='Settings JSON file')
def mutate(genome_path, out, seed, probability, rounds, settings_file):
    """Mutate a genome in place"""
    settings = load_settings(settings_file, seed=seed, mutation_probability=probability)
    genome = load_genome(genome_path)

    config = settings.mutation_config(settings.make_rng())
    changes = 0
    for _ in range(rounds):
        changes += genome.mutate(config)

    out = out or genome_path
    genome.to_json(out)
    click.echo(f"Applied {changes} changes over {rounds} pass(es); "
               f"complexity {genome.get_complexity()}, depth {genome.get_depth()}")
    click.echo(f"Saved: {out}")


@cli.command()
@click.option('--genome', '-g', 'genome_path', required=True, help='Path to genome JSON file')
@click.option('--t', default=0.0, help='Time parameter value')
@click.option('--size', default=128, help='Output size in pixels')
@click.option('--out', '-o', help='Output filename (optional)')
@click.option('--frames', default=0, help='Create animation with N frames')
@click.option('--settings', 'settings_file', type=click.Path(exists=True), help='Settings JSON file')
def render(genome_path, t, size, out, frames, settings_file):
    """Render a genome from JSON file"""
    settings = load_settings(settings_file)
    genome = load_genome(genome_path)
    evaluator = Evaluator(settings.history_frames)

    if not out:
        base_name = os.path.splitext(os.path.basename(genome_path))[0]
        out = f"{base_name}_anim" if frames > 0 else f"{base_name}_t{t:.2f}.png"

    start_time = time.time()
    try:
        if frames > 0:
            click.echo(f"Creating {frames} frame animation...")
            animation_frames = evaluator.create_animation_frames(
                genome, num_frames=frames, size=(size, size), t_start=t)
            os.makedirs(out, exist_ok=True)
            for i, frame in enumerate(animation_frames):
                frame.save(os.path.join(out, f"frame_{i:04d}.png"))
            click.echo(f"Animation frames saved to: {out}/")
        else:
            evaluator.render_image(genome, size=(size, size), t=t, filename=out)
            click.echo(f"Image saved: {out}")
    except ValueError as e:
        click.echo(f"Error during rendering: {e}", err=True)
        sys.exit(1)

    click.echo(f"Render time: {time.time() - start_time:.2f}s")


@cli.command()
@click.option('--genome', '-g', 'genome_path', required=True, help='Path to genome JSON file')
@click.option('--counts', is_flag=True, help='Show per-variant node counts')
def inspect(genome_path, counts):
    """Print a genome's structure"""
    genome = load_genome(genome_path)
    click.echo(str(genome))
    if counts:
        for name, tree in genome.trees.items():
            click.echo(f"\n{name}:")
            for variant, count in sorted(tree.variant_counts().items()):
                click.echo(f"  {variant:32s} {count}")


if __name__ == '__main__':
    cli()
