"""
PBR Tyler

Takes oversized PBR texture captures and turns them into one seamless,
tileable texture set (diffuse, normal, height/roughness/metalness).

The capture holds deliberately redundant material: a base tile plus
separately rendered corner and edge sources. Corner and edge sources are
cut through their middle, where the picture is already seamless, and moved
onto the seams of the output.

Features:
- Two atlas conventions: 2x2 (4-way priority blend) and 3x1 (pairwise chain)
- Radial influence fields per tile role with a sharpness exponent
- Fractal noise on influence and height so seams do not follow circles
- Height-aware layering with an epsilon band for soft transitions
- Toroidal gaussian blur of blend weights
- Command line tool (pbr-tyler) and ComfyUI nodes
"""

from .config import TylerConfig
from .pbr_map import PBRMap, Tile
from .pipeline import TylingPipeline, run_pipeline
from .nodes import NODE_CLASS_MAPPINGS, NODE_DISPLAY_NAME_MAPPINGS

__version__ = "0.1.0"

__all__ = [
    "NODE_CLASS_MAPPINGS",
    "NODE_DISPLAY_NAME_MAPPINGS",
    "TylerConfig",
    "PBRMap",
    "Tile",
    "TylingPipeline",
    "run_pipeline",
]
