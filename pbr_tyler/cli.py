"""
Command line entry point.

    pbr-tyler -i C:/source/tex -o C:/destination/tex

reads tex_d.png, tex_n.png and tex_hrm.png from the input prefix and writes
the seamless tile under the output prefix with the same suffixes.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import CONVENTION_NAMES, TylerConfig
from .influence import FALLOFF_PROFILES
from .loader import PBRIOError, load_pbr, save_pbr
from .logger import setup_logger
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = TylerConfig()
    parser = argparse.ArgumentParser(
        prog="pbr-tyler",
        description="Turn an oversized multi-tile PBR capture into one seamless texture set.",
    )
    parser.add_argument("-i", "--input", required=True, help="Input prefix (_d.png, _n.png, _hrm.png are appended)")
    parser.add_argument("-o", "--output", required=True, help="Output prefix")
    parser.add_argument("-noblur", "--no-blur", dest="blur", action="store_false", help="Do not blur blend weights")
    parser.add_argument("-sharpness", "--sharpness", type=float, default=defaults.sharpness, help="Influence falloff exponent")
    parser.add_argument("-noise", "--noise", dest="noise_strength", type=float, default=defaults.noise_strength,
                        help="Influence noise strength (0..1)")
    parser.add_argument("--no-noise", dest="noise", action="store_false", help="Disable influence noise")
    parser.add_argument("--height-noise", type=float, default=defaults.height_noise_strength,
                        help="Noise mixed into the layering height (0 disables)")
    parser.add_argument("-epsilon", "--epsilon", type=float, default=defaults.epsilon, help="Comparison band width")
    parser.add_argument("--seed", type=int, default=None, help="Noise seed (random when omitted)")
    parser.add_argument("--convention", choices=CONVENTION_NAMES, default=defaults.convention,
                        help="Atlas layout of the capture")
    parser.add_argument("--falloff", choices=list(FALLOFF_PROFILES), default=defaults.falloff_profile,
                        help="Influence falloff profile")
    parser.add_argument("--log-dir", default=None, help="Also write a timestamped log file here")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> TylerConfig:
    return TylerConfig(
        convention=args.convention,
        sharpness=args.sharpness,
        noise=args.noise,
        noise_strength=args.noise_strength,
        height_noise_strength=args.height_noise,
        epsilon=args.epsilon,
        blur=args.blur,
        seed=args.seed,
        falloff_profile=args.falloff,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logger(args.log_dir, level="DEBUG" if args.verbose else "INFO")
    logger.info("--------------------------------------------------------------------")
    logger.info("- PBR TYLER")
    logger.info("--------------------------------------------------------------------")

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        atlas = load_pbr(args.input)
    except PBRIOError as e:
        logger.error(f"Could not load source maps: {e}")
        return 1

    try:
        tile = run_pipeline(atlas, config)
    except ValueError as e:
        logger.error(f"Could not tile '{args.input}': {e}")
        return 1
    del atlas

    try:
        save_pbr(args.output, tile)
    except PBRIOError as e:
        logger.error(f"Could not save output maps: {e}")
        return 1

    logger.info("- PBR TYLER end.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
