from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import pygame

from block_blast.game import BlockBlastGame, FileHighScoreStorage, GameConfig, PieceType, shape_of
from block_blast.game.pieces import shape_rgb


CELL = 40
MARGIN = 20
TRAY_CELL = 24
TRAY_SLOT_H = 6 * TRAY_CELL
EMPTY = (54, 40, 30)
BACKGROUND = (28, 20, 14)
VALID = (120, 220, 140)
INVALID = (220, 120, 120)
TEXT = (235, 225, 210)


def default_high_score_path() -> Path:
    return Path.home() / ".block_blast" / "highscore.json"


def draw_cell(screen: pygame.Surface, rect: pygame.Rect, piece_type: PieceType) -> None:
    fill, border = shape_rgb(piece_type)
    pygame.draw.rect(screen, fill, rect)
    pygame.draw.rect(screen, border, rect, 2)


def draw_board(screen: pygame.Surface, game: BlockBlastGame) -> None:
    size = game.grid.size
    for y in range(size):
        for x in range(size):
            rect = pygame.Rect(MARGIN + x * CELL, MARGIN + y * CELL, CELL - 1, CELL - 1)
            piece_type = game.grid.cell(x, y)
            if piece_type is None:
                pygame.draw.rect(screen, EMPTY, rect)
            else:
                draw_cell(screen, rect, piece_type)
    # Subgrid separators
    n = game.grid.subgrid_size
    for i in range(0, size + 1, n):
        pos = MARGIN + i * CELL - 1
        pygame.draw.line(screen, TEXT, (MARGIN, pos), (MARGIN + size * CELL, pos), 2)
        pygame.draw.line(screen, TEXT, (pos, MARGIN), (pos, MARGIN + size * CELL), 2)


def tray_rects(game: BlockBlastGame) -> List[pygame.Rect]:
    x0 = MARGIN * 2 + game.grid.size * CELL
    rects = []
    for idx, piece_type in enumerate(game.available_pieces):
        shape = shape_of(piece_type)
        rects.append(pygame.Rect(x0, MARGIN + idx * TRAY_SLOT_H, shape.width * TRAY_CELL, shape.height * TRAY_CELL))
    return rects


def draw_tray(screen: pygame.Surface, game: BlockBlastGame, dragging: Optional[int]) -> None:
    for idx, (piece_type, slot) in enumerate(zip(game.available_pieces, tray_rects(game))):
        if idx == dragging:
            continue
        for dx, dy in shape_of(piece_type).cells:
            rect = pygame.Rect(slot.x + dx * TRAY_CELL, slot.y + dy * TRAY_CELL, TRAY_CELL - 1, TRAY_CELL - 1)
            draw_cell(screen, rect, piece_type)


def board_origin(game: BlockBlastGame, piece_type: PieceType, mouse: Tuple[int, int]) -> Tuple[int, int]:
    """Grid origin that centres the dragged piece under the pointer."""
    shape = shape_of(piece_type)
    mx, my = mouse
    gx = (mx - MARGIN - (shape.width * CELL) // 2 + CELL // 2) // CELL
    gy = (my - MARGIN - (shape.height * CELL) // 2 + CELL // 2) // CELL
    return int(gx), int(gy)


def draw_ghost(screen: pygame.Surface, game: BlockBlastGame, piece_type: PieceType, origin: Tuple[int, int]) -> None:
    color = VALID if game.is_valid_placement(piece_type, *origin) else INVALID
    for x, y in shape_of(piece_type).cells_at(*origin):
        if game.grid.is_inside(x, y):
            rect = pygame.Rect(MARGIN + x * CELL, MARGIN + y * CELL, CELL - 1, CELL - 1)
            pygame.draw.rect(screen, color, rect, 3)


def draw_status(screen: pygame.Surface, font: pygame.font.Font, game: BlockBlastGame, callout: str) -> None:
    x_text = MARGIN
    y_text = MARGIN * 2 + game.grid.size * CELL
    lines = [
        f"Score: {game.score}    Best: {game.high_score}    Streak: {game.streak}",
        callout,
        "Drag a piece onto the board. N: new game, ESC: quit",
    ]
    for i, txt in enumerate(lines):
        screen.blit(font.render(txt, True, TEXT), (x_text, y_text + i * 22))
    if game.game_over:
        over = font.render("Game Over - Press N to play again", True, (255, 100, 100))
        screen.blit(over, (MARGIN, 2))


def describe(result) -> str:
    if result.clear is None:
        return f"+{result.placement_points}"
    clear = result.clear
    text = f"+{result.points}  combo x{clear.total_cleared}"
    if clear.score.streak_bonus:
        text += f"  streak {clear.streak} +{clear.score.streak_bonus}"
    return text


def run(high_score_path: Optional[Path] = None, seed: Optional[int] = None) -> None:
    storage = FileHighScoreStorage(high_score_path or default_high_score_path())
    game = BlockBlastGame(GameConfig(random_seed=seed), storage=storage)

    pygame.init()
    try:
        size_px = game.grid.size * CELL
        width = MARGIN * 3 + size_px + 5 * TRAY_CELL
        height = MARGIN * 3 + size_px + 70
        screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Block Blast")
        font = pygame.font.SysFont(None, 24)
        clock = pygame.time.Clock()

        dragging: Optional[int] = None
        callout = ""
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_n:
                        game.reset_game()
                        dragging = None
                        callout = ""
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and not game.game_over:
                    for idx, rect in enumerate(tray_rects(game)):
                        if rect.collidepoint(event.pos):
                            dragging = idx
                            break
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and dragging is not None:
                    if dragging < len(game.available_pieces):
                        piece_type = game.available_pieces[dragging]
                        result = game.place_block(piece_type, *board_origin(game, piece_type, event.pos))
                        if result:
                            callout = describe(result)
                    dragging = None

            screen.fill(BACKGROUND)
            draw_board(screen, game)
            draw_tray(screen, game, dragging)
            if dragging is not None and dragging < len(game.available_pieces):
                piece_type = game.available_pieces[dragging]
                draw_ghost(screen, game, piece_type, board_origin(game, piece_type, pygame.mouse.get_pos()))
            draw_status(screen, font, game, callout)

            pygame.display.flip()
            clock.tick(60)
    finally:
        pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Block Blast")
    parser.add_argument("--high-score-file", type=Path, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")
    run(args.high_score_file, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
