from html import escape
from typing import Optional, Tuple

from models import Board, DIFFICULTIES

# One border colour per difficulty, easiest first.
DIFFICULTY_COLORS = ["#03fc7b", "#d7fc03", "#fca103", "#6200a3", "#c4043a"]
EMPTY_COLOR = "#d0d0d0"


def difficulty_color(difficulty: Optional[int]) -> str:
    if difficulty is None or difficulty not in DIFFICULTIES:
        return EMPTY_COLOR
    return DIFFICULTY_COLORS[difficulty - 1]


def render_board(board: Board, cell_px: int = 96, gap_px: int = 8) -> Tuple[str, str]:
    """Return ``(svg, legend_html)`` for a materialized board."""
    step = cell_px + gap_px
    svg_w = board.width * step + gap_px
    svg_h = board.height * step + gap_px

    rects = []
    for r, row in enumerate(board.rows()):
        for c, cell in enumerate(row):
            x = gap_px + c * step
            y = gap_px + r * step
            color = difficulty_color(cell.difficulty)
            label = escape(cell.name)
            rects.append(
                f'<rect x="{x}" y="{y}" width="{cell_px}" height="{cell_px}" rx="4" '
                f'fill="white" stroke="{color}" stroke-width="3"/>'
                f'<text x="{x + cell_px // 2}" y="{y + cell_px // 2}" font-size="14" '
                f'text-anchor="middle" dominant-baseline="middle" fill="black">{label}</text>'
            )
    svg = (
        f'<svg class="board-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{"".join(rects)}</svg>'
    )

    legend = "".join(
        f"<li><span class='swatch' style='background:{color}'></span>Difficulty {d}</li>"
        for d, color in zip(DIFFICULTIES, DIFFICULTY_COLORS)
    )
    return svg, legend
