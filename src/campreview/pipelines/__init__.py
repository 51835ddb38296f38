"""Frame pipelines."""

from .render_loop import FpsEstimator, LoopState, RenderLoop, draw_overlay, format_status

__all__ = ["FpsEstimator", "LoopState", "RenderLoop", "draw_overlay", "format_status"]
