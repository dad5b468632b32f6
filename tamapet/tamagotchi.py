import logging

import pygame

from .constants import (
    COLOR_BG, COLOR_BTN, COLOR_BTN_DISABLED, COLOR_EGG, COLOR_EGG_CRACK, COLOR_GRAVE,
    COLOR_PET_BODY, COLOR_PET_EYES, COLOR_TEXT, COLOR_UI_BAR_BG, DB_FILE, FPS,
    SCREEN_HEIGHT, SCREEN_WIDTH, STAT_COLORS, STORE_BACKEND,
)
from .database import open_store
from .models import STAT_NAMES, LifeStage
from .persistence import PersistenceGateway
from .pet_entity import Pet
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

STAGE_LABELS = {
    LifeStage.EGG: "Egg",
    LifeStage.HATCHING: "Hatching",
    LifeStage.ALIVE: "Alive",
    LifeStage.DEAD: "Dead",
}

STAGE_ICONS = {
    LifeStage.EGG: "\U0001F95A",
    LifeStage.HATCHING: "\U0001F423",
    LifeStage.ALIVE: "\U0001F425",
    LifeStage.DEAD: "\u26B0\uFE0F",
}

# Buttons per stage: (label, command name or None when disabled)
STAGE_CONTROLS = {
    LifeStage.EGG: [("Hatch", "hatch")],
    LifeStage.HATCHING: [("Hatching...", None)],
    LifeStage.ALIVE: [("Feed", "feed"), ("Play", "play"), ("Nap", "nap"), ("Clean", "clean")],
    LifeStage.DEAD: [("Restart", "restart")],
}

KEY_COMMANDS = {
    pygame.K_h: "hatch",
    pygame.K_r: "restart",
    pygame.K_f: "feed",
    pygame.K_p: "play",
    pygame.K_n: "nap",
    pygame.K_c: "clean",
}


def stage_caption(stage, age):
    """Accessible description of the pet, e.g. 'Stage: Alive. Age: 3.'"""
    return f"Stage: {STAGE_LABELS[stage]}. Age: {age}."


def bar_percent(value):
    return round(max(0.0, min(100.0, value)))


class GameEngine:
    """Manages the window, the event loop and the pet session."""
    def __init__(self, db_path=DB_FILE, backend=STORE_BACKEND, store=None, reset=False):
        pygame.init()
        try:
            self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SCALED)
        except pygame.error:
            # Some headless drivers do not support scaled mode; fall back
            self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.small_font = pygame.font.Font(None, 18)
        self.fps = FPS

        self.store = store if store is not None else open_store(backend, db_path)
        self.scheduler = Scheduler(ticks=pygame.time.get_ticks)
        self.gateway = PersistenceGateway(self.store, self.scheduler)
        if reset:
            self.gateway.clear()
        self.pet = Pet.from_state(self.scheduler, self.gateway.load(), on_state_change=self.gateway.save)
        self.pet.start()
        logger.info("Session started: %s", stage_caption(self.pet.stage, self.pet.age))

        self.button_rects = []
        self._layout_buttons()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def dispatch(self, command):
        """Forward a player command to the pet. Returns False for unknown commands."""
        if command == "hatch":
            self.pet.hatch()
        elif command == "restart":
            self.pet.restart()
        elif command in ("feed", "play", "nap", "clean"):
            self.pet.perform(command)
        else:
            return False
        self._layout_buttons()
        return True

    def _layout_buttons(self):
        """Compute button rects for the current stage so clicks work before first render."""
        controls = STAGE_CONTROLS[self.pet.stage]
        width, height, gap = 100, 40, 12
        total = len(controls) * width + (len(controls) - 1) * gap
        x = (SCREEN_WIDTH - total) // 2
        y = SCREEN_HEIGHT - height - 12
        self.button_rects = []
        for label, command in controls:
            self.button_rects.append((pygame.Rect(x, y, width, height), label, command))
            x += width + gap
        self._layout_stage = self.pet.stage
        pygame.display.set_caption(f"Tamapet {STAGE_ICONS[self.pet.stage]} {STAGE_LABELS[self.pet.stage]}")

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def draw_bar(self, x, y, value, color, label):
        """Renders stat progress bars."""
        pygame.draw.rect(self.screen, COLOR_UI_BAR_BG, (x, y, 100, 15))
        pygame.draw.rect(self.screen, color, (x, y, bar_percent(value), 15))
        lbl = self.small_font.render(f"{label} {bar_percent(value)}%", True, COLOR_TEXT)
        self.screen.blit(lbl, (x, y - 16))

    def draw_pet(self, pos):
        cx, cy = pos
        stage = self.pet.stage
        if stage == LifeStage.DEAD:
            pygame.draw.ellipse(self.screen, COLOR_GRAVE, (cx - 40, cy - 10, 80, 40))
            text = self.font.render("REST IN PEACE", True, (255, 0, 0))
            self.screen.blit(text, text.get_rect(center=(cx, cy - 30)))
            return
        if stage in (LifeStage.EGG, LifeStage.HATCHING):
            egg_rect = pygame.Rect(cx - 30, cy - 45, 60, 90)
            pygame.draw.ellipse(self.screen, COLOR_EGG, egg_rect)
            if stage == LifeStage.HATCHING:
                # Crack grows while the hatch timer runs
                crack = self.pet.hatch_progress()
                pygame.draw.line(self.screen, COLOR_EGG_CRACK, (cx - 20, cy - 5), (cx - 20 + int(40 * crack), cy + 5), 2)
            return
        body_rect = pygame.Rect(cx - 45, cy - 35, 90, 70)
        pygame.draw.ellipse(self.screen, COLOR_PET_BODY, body_rect)
        pygame.draw.circle(self.screen, COLOR_PET_EYES, (cx - 15, cy - 8), 5)
        pygame.draw.circle(self.screen, COLOR_PET_EYES, (cx + 15, cy - 8), 5)
        pygame.draw.rect(self.screen, COLOR_PET_EYES, (cx - 8, cy + 10, 16, 4), border_radius=2)

    def draw_buttons(self):
        for rect, label, command in self.button_rects:
            color = COLOR_BTN if command else COLOR_BTN_DISABLED
            pygame.draw.rect(self.screen, color, rect, border_radius=6)
            text = self.font.render(label, True, COLOR_TEXT)
            self.screen.blit(text, text.get_rect(center=rect.center))

    def render(self):
        self.screen.fill(COLOR_BG)
        stats = self.pet.stats
        # HUD: two bars on each side
        positions = [(12, 24), (12, 64), (SCREEN_WIDTH - 112, 24), (SCREEN_WIDTH - 112, 64)]
        for (x, y), name in zip(positions, STAT_NAMES):
            self.draw_bar(x, y, getattr(stats, name), STAT_COLORS[name], name.capitalize())
        self.draw_pet((SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2 - 10))
        caption = self.small_font.render(stage_caption(self.pet.stage, self.pet.age), True, COLOR_TEXT)
        self.screen.blit(caption, caption.get_rect(center=(SCREEN_WIDTH // 2, SCREEN_HEIGHT - 72)))
        self.draw_buttons()
        pygame.display.flip()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------
    def step(self):
        """Process a single loop iteration (useful for headless tests). Returns False to stop."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_q, pygame.K_ESCAPE):
                    return False
                command = KEY_COMMANDS.get(event.key)
                if command:
                    self.dispatch(command)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                for rect, _, command in self.button_rects:
                    if command and rect.collidepoint(event.pos):
                        self.dispatch(command)
                        break

        self.scheduler.run_pending()
        if self._layout_stage != self.pet.stage:
            self._layout_buttons()

        self.render()
        self.clock.tick(self.fps)
        return True

    def close(self):
        self.pet.close()
        self.scheduler.cancel_all()
        self.store.close()

    def run(self):
        try:
            running = True
            while running:
                running = self.step()
        finally:
            self.close()
            pygame.quit()
        return 0
