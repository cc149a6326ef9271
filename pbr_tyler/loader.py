"""
PNG load/save for PBR texture sets.

A texture set on disk is three files sharing a prefix:

- <prefix>_d.png   diffuse colour (RGBA)
- <prefix>_n.png   normal map (RGB, -1..1 encoded as 0..255)
- <prefix>_hrm.png packed height (R), roughness (G), metalness (B)
"""

import logging
import os

import numpy as np
import torch
from PIL import Image

from .pbr_map import PBRMap

logger = logging.getLogger(__name__)

SUFFIXES = {
    "diffuse": "_d.png",
    "normal": "_n.png",
    "hrm": "_hrm.png",
}


class PBRIOError(Exception):
    """Base class for texture set read/write failures."""


class PBRLoadError(PBRIOError):
    pass


class PBRSaveError(PBRIOError):
    pass


def texture_paths(prefix: str) -> dict:
    return {key: f"{prefix}{suffix}" for key, suffix in SUFFIXES.items()}


def pil_to_tensor(image: Image.Image, mode: str) -> torch.Tensor:
    """Convert a PIL image to a float (H, W, C) tensor in 0..1."""
    np_image = np.asarray(image.convert(mode), dtype=np.float32) / 255.0
    return torch.from_numpy(np_image.copy())


def tensor_to_pil(tensor: torch.Tensor, mode: str) -> Image.Image:
    """Convert a float (H, W, C) tensor in 0..1 to a PIL image."""
    np_image = np.rint(tensor.detach().cpu().clamp(0.0, 1.0).numpy() * 255.0).astype(np.uint8)
    return Image.fromarray(np_image).convert(mode)


def read_image(path: str, mode: str) -> torch.Tensor:
    if not os.path.exists(path):
        raise PBRLoadError(f"Texture not found: {path}")
    try:
        with Image.open(path) as image:
            return pil_to_tensor(image, mode)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise PBRLoadError(f"Decoder error for {path}: {e}") from e


def load_pbr(prefix: str) -> PBRMap:
    """
    Load a texture set.

    Raises:
        PBRLoadError: a file is missing, cannot be decoded, or the three
            images differ in size
    """
    logger.info(f"Load PBR from '{prefix}'.")
    paths = texture_paths(prefix)

    diffuse = read_image(paths["diffuse"], "RGBA")
    normal = read_image(paths["normal"], "RGB")
    hrm = read_image(paths["hrm"], "RGB")

    sizes = {key: tuple(img.shape[:2]) for key, img in (("diffuse", diffuse), ("normal", normal), ("hrm", hrm))}
    if len(set(sizes.values())) != 1:
        raise PBRLoadError(f"Texture set '{prefix}' has mismatched sizes (H, W): {sizes}")

    pbr = PBRMap.from_images(diffuse, normal, hrm)
    logger.info(f"Loaded {pbr.width}x{pbr.height} texture set.")
    return pbr


def save_pbr(prefix: str, pbr: PBRMap) -> dict:
    """
    Write a texture set, returning the paths written.

    Raises:
        PBRSaveError: a file could not be encoded or written
    """
    logger.info(f"Save PBR to '{prefix}'.")
    paths = texture_paths(prefix)
    diffuse, normal, hrm = pbr.to_images()

    directory = os.path.dirname(prefix)
    if directory:
        try:
            os.makedirs(directory, exist_ok=True)
        except (OSError, ValueError) as e:
            raise PBRSaveError(f"Cannot create output directory {directory}: {e}") from e

    for key, tensor, mode in (("diffuse", diffuse, "RGBA"), ("normal", normal, "RGB"), ("hrm", hrm, "RGB")):
        try:
            tensor_to_pil(tensor, mode).save(paths[key], format="PNG")
        except (OSError, ValueError) as e:
            raise PBRSaveError(f"Encoder error for {paths[key]}: {e}") from e

    return paths
