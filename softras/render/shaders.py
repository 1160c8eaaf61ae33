from __future__ import annotations

def _pick_glsl_version(ctx_version_code: int) -> int:
    """GLSL version for the frame-blit quad.

    The quad only needs `in`/`out` varyings and `texture()`, so GLSL 150 covers
    any 3.2+ core context; 330 is used where the driver offers it.
    """
    return 330 if ctx_version_code >= 330 else 150

_VERT_BODY = """
in vec2 in_pos;
in vec2 in_uv;
out vec2 v_uv;

void main() {
    v_uv = in_uv;
    gl_Position = vec4(in_pos, 0.0, 1.0);
}
"""

_FRAG_BODY = """
uniform sampler2D u_frame;
in vec2 v_uv;
out vec4 f_color;

void main() {
    f_color = texture(u_frame, v_uv);
}
"""

def shader_sources(ctx_version_code: int) -> tuple[str, str]:
    ver = _pick_glsl_version(ctx_version_code)
    prefix = f"#version {ver}\n"
    return prefix + _VERT_BODY, prefix + _FRAG_BODY
