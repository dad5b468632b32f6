import json

import pygame
import pytest

from tamapet.constants import STORAGE_KEY
from tamapet.database import JsonFileStore
from tamapet.models import LifeStage
from tamapet.tamagotchi import STAGE_CONTROLS, GameEngine, bar_percent, stage_caption


@pytest.fixture
def engine(tmp_path):
    eng = GameEngine(store=JsonFileStore(str(tmp_path / "pet_save.json")))
    yield eng
    eng.close()
    pygame.quit()


def saved(engine):
    return json.loads(engine.store.get(STORAGE_KEY))


def press(key):
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": key, "mod": 0, "unicode": ""}))


def click(pos):
    pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": pos, "button": 1}))


def test_new_game_starts_as_egg_with_hatch_button(engine):
    assert engine.pet.stage == LifeStage.EGG
    assert [label for _, label, _ in engine.button_rects] == ["Hatch"]
    assert engine.step() is True


def test_hatch_key_starts_hatching_and_saves(engine):
    press(pygame.K_h)
    engine.step()
    assert engine.pet.stage == LifeStage.HATCHING
    assert saved(engine)["stage"] == "hatching"
    # The hatching control is shown but disabled
    assert [(label, command) for _, label, command in engine.button_rects] == [("Hatching...", None)]


def test_click_hatch_then_pet_comes_alive(engine):
    rect, _, _ = engine.button_rects[0]
    click(rect.center)
    engine.step()
    assert engine.pet.stage == LifeStage.HATCHING
    pygame.time.wait(1400)
    engine.step()
    assert engine.pet.stage == LifeStage.ALIVE
    assert saved(engine)["stage"] == "alive"
    assert [label for _, label, _ in engine.button_rects] == ["Feed", "Play", "Nap", "Clean"]


def test_care_keys_are_ignored_for_an_egg(engine):
    before = engine.pet.snapshot()
    for key in (pygame.K_f, pygame.K_p, pygame.K_n, pygame.K_c):
        press(key)
    engine.step()
    assert engine.pet.snapshot() == before


def test_dispatch_feed_while_alive(engine):
    engine.pet.hatch()
    pygame.time.wait(1400)
    engine.step()
    hunger = engine.pet.stats.hunger
    assert engine.dispatch("feed") is True
    assert engine.pet.stats.hunger == pytest.approx(min(100.0, hunger + 15))
    assert engine.dispatch("dance") is False


def test_restart_key_returns_to_egg(engine):
    engine.pet.hatch()
    press(pygame.K_r)
    engine.step()
    assert engine.pet.stage == LifeStage.EGG
    assert saved(engine)["stage"] == "egg"


def test_quit_key_stops_loop(engine):
    press(pygame.K_q)
    assert engine.step() is False


def test_resumes_saved_pet(tmp_path):
    path = str(tmp_path / "pet_save.json")
    first = GameEngine(store=JsonFileStore(path))
    first.pet.hatch()
    first.close()
    second = GameEngine(store=JsonFileStore(path))
    try:
        assert second.pet.stage == LifeStage.HATCHING
    finally:
        second.close()
        pygame.quit()


def test_reset_discards_saved_pet(tmp_path):
    path = str(tmp_path / "pet_save.json")
    first = GameEngine(store=JsonFileStore(path))
    first.pet.hatch()
    first.close()
    second = GameEngine(store=JsonFileStore(path), reset=True)
    try:
        assert second.pet.stage == LifeStage.EGG
    finally:
        second.close()
        pygame.quit()


@pytest.mark.parametrize("stage, label", [
    (LifeStage.EGG, "Egg"),
    (LifeStage.HATCHING, "Hatching"),
    (LifeStage.ALIVE, "Alive"),
    (LifeStage.DEAD, "Dead"),
])
def test_stage_caption(stage, label):
    assert stage_caption(stage, 7) == f"Stage: {label}. Age: 7."


def test_every_stage_has_controls():
    assert set(STAGE_CONTROLS) == set(LifeStage)


@pytest.mark.parametrize("value, percent", [(0, 0), (49.6, 50), (100, 100), (-5, 0), (130, 100)])
def test_bar_percent(value, percent):
    assert bar_percent(value) == percent
