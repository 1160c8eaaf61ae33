from __future__ import annotations

import logging
import time
from typing import Optional

import pygame
import moderngl

from softras.config import APP_VERSION, DELTA_ANGLE, FPS_CAP
from softras.errors import ResourceError
from softras.io.image import save_depth_image, save_image
from softras.pipeline.rasterizer import Rasterizer
from softras.render.presenter import FramePresenter
from softras.scenes import Scene

log = logging.getLogger(__name__)

def _init_pygame_gl(major: int = 3, minor: int = 3) -> None:
    """Request a core-profile context for presenting frames.

    Depth testing happens on the CPU, so no GL depth buffer is requested.
    """
    pygame.init()
    attrs = {
        pygame.GL_CONTEXT_MAJOR_VERSION: major,
        pygame.GL_CONTEXT_MINOR_VERSION: minor,
        pygame.GL_CONTEXT_PROFILE_MASK: pygame.GL_CONTEXT_PROFILE_CORE,
        pygame.GL_DOUBLEBUFFER: 1,
        pygame.GL_DEPTH_SIZE: 0,
    }
    for attr, value in attrs.items():
        pygame.display.gl_set_attribute(attr, value)

def render_to_file(
    scene: Scene,
    rast: Rasterizer,
    *,
    angle: float,
    output: str,
    depth_output: Optional[str] = None,
) -> None:
    """Render one frame and write it as an image (no window)."""
    scene.setup(rast)
    t0 = time.perf_counter()
    scene.render(rast, angle)
    log.info("rendered %dx%d (S=%d) in %.3fs", rast.width, rast.height, rast.supersample, time.perf_counter() - t0)
    save_image(rast, output)
    if depth_output:
        save_depth_image(rast, depth_output)

def run_app(
    *,
    scene: Scene,
    rast: Rasterizer,
    angle: float,
    debug: bool,
) -> None:
    _init_pygame_gl()

    flags = pygame.OPENGL | pygame.DOUBLEBUF | pygame.RESIZABLE
    pygame.display.set_mode((rast.width, rast.height), flags)
    pygame.display.set_caption(f"softras v{APP_VERSION}")

    try:
        ctx = moderngl.create_context()
    except Exception as e:
        pygame.quit()
        raise ResourceError("Failed to create ModernGL context (need OpenGL 3.2+)") from e

    if debug:
        print(f"[softras] moderngl ctx version_code={ctx.version_code} vendor={ctx.info.get('GL_VENDOR')} renderer={ctx.info.get('GL_RENDERER')}")

    ctx.viewport = (0, 0, rast.width, rast.height)
    presenter = FramePresenter(ctx)

    clock = pygame.time.Clock()
    running = True
    dirty = True

    try:
        scene.setup(rast)
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_a:
                        angle += DELTA_ANGLE
                        dirty = True
                    elif event.key == pygame.K_d:
                        angle -= DELTA_ANGLE
                        dirty = True
                elif event.type == pygame.VIDEORESIZE:
                    w, h = max(64, event.w), max(64, event.h)
                    pygame.display.set_mode((w, h), flags)
                    presenter.resize(w, h)

            if dirty:
                t0 = time.perf_counter()
                scene.render(rast, angle)
                presenter.upload(rast.dump_u8norm(), rast.width, rast.height)
                dirty = False
                if debug:
                    print(f"[softras] angle={angle:.1f} frame={1000.0 * (time.perf_counter() - t0):.1f}ms")

            presenter.draw()
            pygame.display.flip()

            if FPS_CAP and FPS_CAP > 0:
                clock.tick(FPS_CAP)
            else:
                clock.tick()
    finally:
        presenter.release()
        pygame.quit()
