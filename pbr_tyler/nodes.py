import torch

from .config import CONVENTION_NAMES, TylerConfig
from .influence import FALLOFF_PROFILES
from .pbr_map import PBRMap
from .pipeline import get_convention, run_pipeline


class PBRSeamlessTile:
    @classmethod
    def INPUT_TYPES(s):
        defaults = TylerConfig()
        return {
            "required": {
                "diffuse": ("IMAGE", {"tooltip": "Diffuse atlas (RGB or RGBA)."}),
                "normal": ("IMAGE", {"tooltip": "Normal map atlas, same size as diffuse."}),
                "hrm": ("IMAGE", {"tooltip": "Packed height (R), roughness (G), metalness (B) atlas."}),
                "convention": (
                    list(CONVENTION_NAMES),
                    {"default": defaults.convention, "tooltip": "Layout of the source tiles inside the atlas."},
                ),
                "sharpness": (
                    "FLOAT",
                    {
                        "default": defaults.sharpness,
                        "min": 0.0,
                        "max": 8.0,
                        "step": 0.005,
                        "tooltip": "Influence falloff exponent. Higher keeps each tile's claim near its center.",
                    },
                ),
                "noise_strength": (
                    "FLOAT",
                    {
                        "default": defaults.noise_strength,
                        "min": 0.0,
                        "max": 1.0,
                        "step": 0.01,
                        "tooltip": "Fractal noise mixed into influence fields (0=radial seams).",
                    },
                ),
                "epsilon": (
                    "FLOAT",
                    {
                        "default": defaults.epsilon,
                        "min": 0.001,
                        "max": 1.0,
                        "step": 0.001,
                        "tooltip": "Comparison band width. Larger gives softer transitions.",
                    },
                ),
                "blur": ("BOOLEAN", {"default": defaults.blur, "tooltip": "Blur blend weights."}),
                "seed": ("INT", {"default": 0, "min": 0, "max": 2 ** 31 - 1, "tooltip": "Noise seed."}),
            },
            "optional": {
                "falloff_profile": (
                    list(FALLOFF_PROFILES),
                    {"default": defaults.falloff_profile, "tooltip": "Inner radius of the influence ramp."},
                ),
            },
        }

    RETURN_TYPES = ("IMAGE", "IMAGE", "IMAGE")
    RETURN_NAMES = ("diffuse", "normal", "hrm")
    FUNCTION = "process"
    CATEGORY = "PBR Tyler"

    def process(self, diffuse, normal, hrm, convention, sharpness, noise_strength, epsilon, blur, seed,
                falloff_profile="standard"):
        config = TylerConfig(
            convention=convention,
            sharpness=sharpness,
            noise=noise_strength > 0,
            noise_strength=noise_strength,
            epsilon=epsilon,
            blur=blur,
            seed=seed,
            falloff_profile=falloff_profile,
        )

        batch = diffuse.shape[0]
        if normal.shape[0] != batch or hrm.shape[0] != batch:
            raise ValueError(
                f"Batch sizes differ: diffuse={batch}, normal={normal.shape[0]}, hrm={hrm.shape[0]}"
            )

        out_d, out_n, out_hrm = [], [], []
        for index in range(batch):
            atlas = PBRMap.from_images(diffuse[index], normal[index], hrm[index])
            tile_d, tile_n, tile_hrm = run_pipeline(atlas, config).to_images()
            # Keep the channel count the diffuse input came with.
            out_d.append(tile_d[..., : diffuse.shape[-1]])
            out_n.append(tile_n)
            out_hrm.append(tile_hrm)

        return (torch.stack(out_d), torch.stack(out_n), torch.stack(out_hrm))


class PBRTileCalc:
    @classmethod
    def INPUT_TYPES(s):
        return {
            "required": {
                "atlas_width": ("INT", {"default": 2048, "min": 2, "max": 9 * 4096, "tooltip": "Width of the captured atlas."}),
                "atlas_height": ("INT", {"default": 2048, "min": 2, "max": 9 * 4096, "tooltip": "Height of the captured atlas."}),
                "convention": (list(CONVENTION_NAMES), {"default": "2x2", "tooltip": "Layout of the source tiles."}),
            }
        }

    RETURN_TYPES = ("INT", "INT")
    RETURN_NAMES = ("tile_width", "tile_height")
    FUNCTION = "calc"
    CATEGORY = "PBR Tyler"

    def calc(self, atlas_width, atlas_height, convention):
        tile_width, tile_height = get_convention(convention).tile_size(atlas_width, atlas_height)
        return [tile_width, tile_height]


NODE_CLASS_MAPPINGS = {
    "PBRTylerSeamlessTile": PBRSeamlessTile,
    "PBRTylerTileCalc": PBRTileCalc,
}

NODE_DISPLAY_NAME_MAPPINGS = {
    "PBRTylerSeamlessTile": "Seamless PBR Tile (PBR Tyler)",
    "PBRTylerTileCalc": "PBR Tile Size (PBR Tyler)",
}
