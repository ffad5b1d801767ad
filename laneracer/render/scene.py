from __future__ import annotations

"""pygame drawing for the road, cars, HUD and overlays."""

import pygame

from game_engine import VEHICLE, Obstacle, Player, RunState, WorldGeometry

C_BG = (7, 10, 14)
C_ROAD = (15, 22, 32)
C_SHOULDER = (17, 26, 37)
C_LANE_LINE = (48, 52, 58)
C_DASH = (145, 148, 152)
C_WHITE = (255, 255, 255)
C_DIM = (160, 168, 180)
C_ACCENT = (76, 194, 255)
C_STRIPE = (255, 207, 76)
C_PLAYER_TOP = (115, 215, 255)
C_PLAYER_BOTTOM = (28, 120, 168)
C_CAR_TOP = (255, 138, 138)
C_CAR_BOTTOM = (164, 33, 48)
C_BLOCK = (42, 51, 64)
C_SHADOW = (0, 0, 0, 70)
C_GLASS = (234, 242, 255, 65)

SHOULDER_W = 16
DASH_H, DASH_GAP, DASH_W = 28, 20, 6


def _rounded(surf, color, rect, radius, width=0):
    pygame.draw.rect(surf, color, rect, width, border_radius=int(radius))


def _gradient_body(w, h, top, bottom, radius):
    """Vertical gradient clipped to a rounded rect, on its own alpha surface."""
    w, h = max(1, int(w)), max(1, int(h))
    body = pygame.Surface((w, h), pygame.SRCALPHA)
    for row in range(h):
        t = row / max(1, h - 1)
        color = tuple(int(a + (b - a) * t) for a, b in zip(top, bottom))
        pygame.draw.line(body, color, (0, row), (w, row))
    mask = pygame.Surface((w, h), pygame.SRCALPHA)
    _rounded(mask, (255, 255, 255, 255), (0, 0, w, h), radius)
    body.blit(mask, (0, 0), special_flags=pygame.BLEND_RGBA_MIN)
    return body


def _overlay_rect(surf, color, rect, radius):
    layer = pygame.Surface((int(rect[2]) + 1, int(rect[3]) + 1), pygame.SRCALPHA)
    _rounded(layer, color, (0, 0, rect[2], rect[3]), radius)
    surf.blit(layer, (rect[0], rect[1]))


def draw_background(surf, g: WorldGeometry, scroll: float) -> None:
    """Asphalt band, shoulders, lane dividers and the scrolling center dashes."""
    surf.fill(C_BG)
    road_h = g.bottom_y - g.top_y
    pygame.draw.rect(surf, C_ROAD, (g.road_left, g.top_y, g.road_right - g.road_left, road_h))
    pygame.draw.rect(surf, C_SHOULDER, (g.road_left - SHOULDER_W, g.top_y, SHOULDER_W, road_h))
    pygame.draw.rect(surf, C_SHOULDER, (g.road_right, g.top_y, SHOULDER_W, road_h))

    for i in range(1, g.lane_count):
        x = g.road_left + i * g.lane_width
        pygame.draw.line(surf, C_LANE_LINE, (x, g.top_y), (x, g.bottom_y), 2)

    step = DASH_H + DASH_GAP
    clip = surf.get_clip()
    surf.set_clip(pygame.Rect(0, int(g.top_y), int(g.width), int(road_h)))
    for x in g.lane_centers:
        y = g.top_y - step
        while y < g.bottom_y + step:
            pygame.draw.rect(surf, C_DASH, (x - DASH_W / 2, y + scroll, DASH_W, DASH_H))
            y += step
    surf.set_clip(clip)


def draw_player(surf, p: Player) -> None:
    x, y = p.x - p.w / 2, p.y
    _overlay_rect(surf, C_SHADOW, (x + 3, y + 6, p.w, p.h), 10)
    surf.blit(_gradient_body(p.w, p.h, C_PLAYER_TOP, C_PLAYER_BOTTOM, 12), (x, y))
    _overlay_rect(surf, C_GLASS, (x + p.w * 0.18, y + p.h * 0.12, p.w * 0.64, p.h * 0.26), 10)
    pygame.draw.rect(surf, C_STRIPE, (x + p.w * 0.46, y + 6, p.w * 0.08, p.h - 12))


def draw_obstacle(surf, o: Obstacle) -> None:
    x, y = o.x - o.w / 2, o.y
    _overlay_rect(surf, C_SHADOW, (x + 3, y + 6, o.w, o.h), 10)

    if o.kind == VEHICLE:
        surf.blit(_gradient_body(o.w, o.h, C_CAR_TOP, C_CAR_BOTTOM, 12), (x, y))
        _overlay_rect(surf, C_GLASS, (x + o.w * 0.18, y + o.h * 0.12, o.w * 0.64, o.h * 0.26), 10)
        # tail lights
        pygame.draw.rect(surf, C_STRIPE, (x + o.w * 0.12, y + o.h * 0.78, o.w * 0.18, o.h * 0.12))
        pygame.draw.rect(surf, C_STRIPE, (x + o.w * 0.70, y + o.h * 0.78, o.w * 0.18, o.h * 0.12))
    else:
        _rounded(surf, C_BLOCK, (x, y, o.w, o.h), 10)
        _rounded(surf, C_ACCENT, (x, y, o.w, o.h), 10, width=2)
        pygame.draw.rect(surf, C_STRIPE, (x + 8, y + 10, o.w - 16, 8))
        pygame.draw.rect(surf, C_STRIPE, (x + 8, y + o.h - 18, o.w - 16, 8))


class PygameRenderer:
    """Renderer collaborator: draws whatever the engine exposes, owns no game state."""

    def __init__(self, surf):
        self.surf = surf
        self.scroll = 0.0
        self.blink = 0
        try:
            self.font_score = pygame.font.SysFont("Courier New", 34, bold=True)
            self.font_title = pygame.font.SysFont("Courier New", 48, bold=True)
            self.font_sub = pygame.font.SysFont("Courier New", 17)
        except Exception:
            self.font_score = pygame.font.SysFont(None, 34)
            self.font_title = pygame.font.SysFont(None, 48)
            self.font_sub = pygame.font.SysFont(None, 17)

    def set_surface(self, surf) -> None:
        self.surf = surf

    def _text(self, font, text, color, cy):
        img = font.render(text, True, color)
        self.surf.blit(img, (self.surf.get_width() // 2 - img.get_width() // 2, int(cy)))

    def draw(self, g: WorldGeometry, player: Player, obstacles, state: RunState,
             *, speed: float, score: float, best: int, final_score: int) -> None:
        self.blink += 1
        if state is RunState.RUNNING:
            self.scroll = (self.scroll + speed / 60) % (DASH_H + DASH_GAP)

        draw_background(self.surf, g, self.scroll)
        for o in obstacles:
            draw_obstacle(self.surf, o)
        draw_player(self.surf, player)

        if state is RunState.RUNNING:
            self._draw_hud(score, best)
        else:
            self._draw_overlay(state, g, best, final_score)

    def _draw_hud(self, score, best):
        sc = self.font_score.render(f"{int(score):05d}", True, C_WHITE)
        self.surf.blit(sc, (16, 12))
        bs = self.font_sub.render(f"BEST {best}", True, C_DIM)
        self.surf.blit(bs, (self.surf.get_width() - bs.get_width() - 16, 20))

    def _draw_overlay(self, state, g, best, final_score):
        dim = pygame.Surface(self.surf.get_size(), pygame.SRCALPHA)
        dim.fill((0, 0, 0, 155))
        self.surf.blit(dim, (0, 0))
        mid = g.height // 2

        if state is RunState.MENU:
            self._text(self.font_title, "LANERACER", C_ACCENT, mid - 110)
            self._text(self.font_sub, f"best {best}", C_DIM, mid - 40)
            if self.blink % 60 < 42:
                self._text(self.font_sub, "ENTER to start", C_WHITE, mid + 10)
            self._text(self.font_sub, "H  how to play", C_DIM, mid + 45)
        elif state is RunState.HOW:
            self._text(self.font_title, "HOW TO PLAY", C_ACCENT, mid - 140)
            lines = (
                "← →  or  A D  switch lanes",
                "hold to keep moving",
                "dodge cars and barriers",
                "it gets faster. it never stops.",
                "P pause   R restart   S sound",
                "ESC back",
            )
            for i, line in enumerate(lines):
                self._text(self.font_sub, line, C_DIM, mid - 60 + i * 30)
        elif state is RunState.PAUSED:
            self._text(self.font_title, "PAUSED", C_ACCENT, mid - 90)
            self._text(self.font_sub, "P resume   R restart   ESC menu", C_DIM, mid + 10)
        elif state is RunState.GAMEOVER:
            self._text(self.font_title, "GAME OVER", C_ACCENT, mid - 110)
            self._text(self.font_score, f"{final_score:05d}", C_WHITE, mid - 40)
            if final_score >= best and final_score > 0:
                self._text(self.font_sub, "new best", C_ACCENT, mid + 10)
            if self.blink % 60 < 42:
                self._text(self.font_sub, "ENTER play again   ESC menu", C_DIM, mid + 55)
