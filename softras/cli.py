from __future__ import annotations

import argparse
import logging

from softras.app import render_to_file, run_app
from softras.config import (
    APP_VERSION,
    DEFAULT_PERSPECTIVE_CORRECT,
    DEFAULT_SCENE,
    DEFAULT_SHADER,
    DEFAULT_SUPERSAMPLE,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from softras.pipeline.rasterizer import Rasterizer
from softras.scenes import SHADERS, make_scene

def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="softras", description=f"Software triangle rasterizer (numpy + pygame/ModernGL viewer) v{APP_VERSION}")
    p.add_argument("--scene", choices=["triangle", "colored", "model"], default=DEFAULT_SCENE, help="what to draw (default: colored)")
    p.add_argument("--model", default=None, help="OBJ file for --scene model")
    p.add_argument("--texture", default=None, help="texture image for the texture shader")
    p.add_argument("--shader", choices=sorted(SHADERS), default=DEFAULT_SHADER, help="fragment shader for --scene model")
    p.add_argument("--angle", type=float, default=0.0, help="initial rotation angle (degrees)")
    p.add_argument("--width", type=int, default=WINDOW_WIDTH, help="frame width in pixels")
    p.add_argument("--height", type=int, default=WINDOW_HEIGHT, help="frame height in pixels")
    p.add_argument("--supersample", type=int, default=DEFAULT_SUPERSAMPLE, help="samples per pixel axis (default: 2)")
    p.add_argument(
        "--perspective-correct",
        action="store_true",
        default=DEFAULT_PERSPECTIVE_CORRECT,
        help="interpolate attributes perspective-correctly (default off)",
    )
    p.add_argument("-o", "--output", default=None, help="render once to this image file and exit")
    p.add_argument("--depth-output", default=None, help="with --output, also write the depth buffer as an image")
    p.add_argument("--debug", action="store_true", help="verbose logs")
    return p.parse_args(argv)

def main(argv=None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    scene = make_scene(args.scene, model=args.model, shader=args.shader, texture=args.texture)
    rast = Rasterizer(
        int(args.width),
        int(args.height),
        int(args.supersample),
        perspective_correct=bool(args.perspective_correct),
    )

    if args.output:
        render_to_file(
            scene,
            rast,
            angle=float(args.angle),
            output=str(args.output),
            depth_output=args.depth_output,
        )
        return

    run_app(
        scene=scene,
        rast=rast,
        angle=float(args.angle),
        debug=bool(args.debug),
    )

if __name__ == "__main__":
    main()
