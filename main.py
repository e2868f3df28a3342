#!/usr/bin/env python3
"""
scatterforge - material scatter probe

Fires many rays at a flat patch of each material and reports how they scatter.
"""

import argparse
import logging
import sys
import time
from typing import Dict, List, Optional

from scatterforge.materials import Material
from scatterforge.material_parser import MaterialParseError, load_materials, parse_materials
from scatterforge.probe import ProbeSettings, probe_material
from scatterforge.logging_config import setup_logging

logger = logging.getLogger('scatterforge.cli')

DEFAULT_LIBRARY = {
    'materials': {
        'matte': {'type': 'lambertian', 'albedo': [0.5, 0.5, 0.5]},
        'mirror': {'type': 'metal', 'albedo': [0.8, 0.8, 0.8]},
        'water': {'type': 'dielectric', 'refractive_index': 1.33},
        'glass': {'type': 'dielectric', 'refractive_index': 1.5},
        'diamond': {'type': 'dielectric', 'refractive_index': 2.4},
    }
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='scatterforge - material scatter probe',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --list
  python main.py --material glass --angle 60 --trials 50000
  python main.py --material glass --inside --angle 45
  python main.py --materials library.yaml --workers 4 --seed 7
        '''
    )

    parser.add_argument('--materials', type=str, default=None,
                        help='YAML or JSON material library (default: built-in presets)')
    parser.add_argument('--material', action='append', default=None,
                        help='Material to probe, repeatable (default: all)')
    parser.add_argument('--trials', type=int, default=10000, help='Rays per material (default: 10000)')
    parser.add_argument('--angle', type=float, default=0.0,
                        help='Incidence angle from the normal in degrees (default: 0)')
    parser.add_argument('--inside', action='store_true', help='Ray exits the object instead of entering')
    parser.add_argument('--seed', type=int, default=None, help='Random seed (default: OS entropy)')
    parser.add_argument('--workers', type=int, default=1, help='Worker threads (default: 1)')
    parser.add_argument('--log-level', type=str.upper, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Log level (default: WARNING)')
    parser.add_argument('--list', action='store_true', help='List available materials and exit')
    return parser


def print_report(name: str, material: Material, stats, elapsed: float) -> None:
    print(f"\n{name}: {material}")
    print(f"  Trials:       {stats.trials}")
    print(f"  Scattered:    {stats.scattered} ({stats.scatter_rate:.1%})")
    print(f"  Absorbed:     {stats.absorbed}")
    print(f"  Reflected:    {stats.reflected} ({stats.reflect_fraction:.2%} of scattered)")
    print(f"  Transmitted:  {stats.transmitted}")
    if stats.expected_reflectance is not None:
        print(f"  Expected reflectance: {stats.expected_reflectance:.2%}")
    print(f"  Mean direction: {stats.mean_direction}")
    print(f"  Time: {elapsed:.2f}s ({stats.trials / max(elapsed, 1e-9):.0f} scatters/s)")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.materials:
            library: Dict[str, Material] = load_materials(args.materials)
        else:
            library = parse_materials(DEFAULT_LIBRARY)
    except MaterialParseError as e:
        logger.error("%s", e)
        return 1

    if args.list:
        for name, material in library.items():
            print(f"{name}: {material}")
        return 0

    names = args.material or list(library)
    unknown = [name for name in names if name not in library]
    if unknown:
        logger.error("Unknown material(s): %s", ', '.join(unknown))
        return 2

    try:
        settings = ProbeSettings(
            trials=args.trials,
            angle=args.angle,
            inside=args.inside,
            seed=args.seed,
            workers=args.workers,
        )
    except ValueError as e:
        logger.error("%s", e)
        return 2

    print("=" * 60)
    print("scatterforge material probe")
    print("=" * 60)
    side = 'inside' if settings.inside else 'outside'
    print(f"Incidence: {settings.angle:.1f} deg from {side}, {settings.trials} trials, "
          f"{settings.workers} worker(s)")

    for name in names:
        start_time = time.time()
        stats = probe_material(library[name], settings)
        print_report(name, library[name], stats, time.time() - start_time)

    return 0


if __name__ == '__main__':
    sys.exit(main())
