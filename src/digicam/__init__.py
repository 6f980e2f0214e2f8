from .config import EffectOptions, BloomParams, EffectParams, PipelineConfig, derive_params
from .errors import (
    DigicamError, InvalidInput, DecodeFailure, SurfaceAllocationFailure,
    EncodeFailure, RecodeFailure, PipelineCancelled,
)
from .buffer import PixelBuffer
from .backend import RasterBackend, OpenCVBackend
from .resample import Resampler
from .color import ColorGrader, CoolCast, SaturationBoost, DynamicRangeReducer
from .contrast import LocalContrastReducer
from .bloom import BloomCompositor, BloomLayers
from .lens import ChromaticAberrationFilter, LensDistortion
from .sharpen import Sharpener
from .noise import NoiseInjector
from .recode import LossyRecodeSimulator
from .stamp import DateStampOverlay, random_date_text
from .pipeline import Stage, Y2KPipeline, PipelineResult, apply_y2k_effect
from .helpers import decode_image, load_image, save_image, list_images, resolve_source
from .camera import Y2KCamera

__all__ = [
    "EffectOptions", "BloomParams", "EffectParams", "PipelineConfig", "derive_params",
    "DigicamError", "InvalidInput", "DecodeFailure", "SurfaceAllocationFailure",
    "EncodeFailure", "RecodeFailure", "PipelineCancelled",
    "PixelBuffer",
    "RasterBackend", "OpenCVBackend",
    "Resampler",
    "ColorGrader", "CoolCast", "SaturationBoost", "DynamicRangeReducer",
    "LocalContrastReducer",
    "BloomCompositor", "BloomLayers",
    "ChromaticAberrationFilter", "LensDistortion",
    "Sharpener",
    "NoiseInjector",
    "LossyRecodeSimulator",
    "DateStampOverlay", "random_date_text",
    "Stage", "Y2KPipeline", "PipelineResult", "apply_y2k_effect",
    "decode_image", "load_image", "save_image", "list_images", "resolve_source",
    "Y2KCamera",
]
