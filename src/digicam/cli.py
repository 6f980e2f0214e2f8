from __future__ import annotations
import argparse
import logging
import os
from typing import List, Optional

from .camera import Y2KCamera
from .config import EffectOptions, PipelineConfig
from .helpers import ensure_dir, list_images, load_image, save_image
from .scenes import SCENES
from .viz import StageRecorder, Visualizer

logger = logging.getLogger(__name__)


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Early-2000s digital camera effect")
    g_io = p.add_argument_group("I/O")
    g_io.add_argument("--image", type=str, help="Path to a single image")
    g_io.add_argument("--dir", type=str, help="Path to a directory of images")
    g_io.add_argument("--demo", choices=sorted(SCENES), help="Run on a synthetic scene")
    g_io.add_argument("--save_dir", type=str, default=None, help="Output folder")
    g_io.add_argument("--suffix", type=str, default="_y2k", help="Appended to output file names")
    g_io.add_argument("--show", action="store_true", help="Display before/after and per-stage figures")

    g_fx = p.add_argument_group("Effect")
    g_fx.add_argument("--intensity", type=float, default=1.0)
    g_fx.add_argument("--no_date_stamp", action="store_true")
    g_fx.add_argument("--date_text", type=str, default=None, help="Date stamp text (default: random 2001-2006)")
    g_fx.add_argument("--quality", type=int, default=85, help="JPEG quality of saved results")
    g_fx.add_argument("--seed", type=int, default=None)

    g_rt = p.add_argument_group("Runtime")
    g_rt.add_argument("--workers", type=int, default=1, help="Parallel workers for --dir")
    g_rt.add_argument("--log_level", type=str, default="INFO",
                      choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    effect = EffectOptions(
        intensity=args.intensity,
        add_date_stamp=not args.no_date_stamp,
        date_stamp_text=args.date_text,
        output_quality=args.quality,
    )
    return PipelineConfig(
        effect=effect,
        save_dir=args.save_dir,
        show=args.show,
        workers=max(1, args.workers),
        seed=args.seed,
        suffix=args.suffix,
    )


def _output_path(cfg: PipelineConfig, name: str) -> str:
    return os.path.join(cfg.save_dir, f"{name}{cfg.suffix}.jpg")


def _process_one(camera: Y2KCamera, cfg: PipelineConfig, name: str, image) -> None:
    recorder = StageRecorder() if cfg.show else None
    out = camera.process(image=image, on_stage=recorder)
    for warning in camera.result.warnings:
        logger.warning("%s: %s", name, warning)

    if cfg.show:
        Visualizer.show_before_after(image, out)
        Visualizer.show_stages(recorder.snapshots)

    if cfg.save_dir:
        camera.save_result(_output_path(cfg, name))


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_argparser()
    args = parser.parse_args(argv)
    if args.dir and args.show:
        parser.error("--show is only supported with --image or --demo")
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = config_from_args(args)
    camera = Y2KCamera(cfg.effect, seed=cfg.seed)
    if cfg.save_dir:
        ensure_dir(cfg.save_dir)

    if args.image:
        base = os.path.splitext(os.path.basename(args.image))[0]
        _process_one(camera, cfg, base, load_image(args.image))
    elif args.demo:
        _process_one(camera, cfg, f"demo_{args.demo}", SCENES[args.demo]())
    elif args.dir:
        paths = list_images(args.dir, skip_suffix=cfg.suffix)
        results = camera.process_many(paths, workers=cfg.workers)
        for path, out in zip(paths, results):
            base = os.path.splitext(os.path.basename(path))[0]
            if cfg.save_dir:
                save_image(_output_path(cfg, base), out, quality=cfg.effect.output_quality)
        logger.info("Processed %d images from %s", len(paths), args.dir)
    else:
        raise SystemExit("Provide one of --image, --dir or --demo")


if __name__ == "__main__":
    main()
