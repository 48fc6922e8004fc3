"""Shared fixtures: small RPG Maker MZ projects on disk."""

import json
from pathlib import Path

import pytest

CORE_ENGINE = """/*:
 * @target MZ
 * @plugindesc Core engine tweaks
 */
(() => {
    const _Game_Map_update = Game_Map.prototype.update;
    Game_Map.prototype.update = function(sceneActive) {
        _Game_Map_update.call(this, sceneActive);
    };
    Scene_Map.prototype.start = function() {};
})();
"""

BATTLE_CORE = """/*:
 * @target MZ
 * @plugindesc Battle additions
 * @base CoreEngine
 * @orderAfter CoreEngine
 */
Game_Map.prototype.update = function() {};
Game_Actor.prototype.setup = function(actorId) {};
"""

MY_PATCH = """// Game_Actor.prototype.setup = oldSetup;
/*:
 * @plugindesc Patch
 */
const _setup = Game_Actor.prototype.setup;
Game_Actor.prototype.setup = function(actorId) {
    _setup.call(this, actorId);
};
"""


def write_project(root: Path, plugins: dict[str, str], load_order=None) -> Path:
    """
    Lay out js/plugins/*.js and, if load_order is given, js/plugins.js.

    load_order items are names (enabled) or (name, status) pairs.
    """
    plugins_dir = root / "js" / "plugins"
    plugins_dir.mkdir(parents=True, exist_ok=True)
    for name, source in plugins.items():
        (plugins_dir / f"{name}.js").write_text(source, encoding="utf-8")

    if load_order is not None:
        entries = []
        for item in load_order:
            name, status = (item, True) if isinstance(item, str) else item
            entries.append({"name": name, "status": status, "description": "", "parameters": {}})
        (root / "js" / "plugins.js").write_text(
            "// Generated by RPG Maker.\nvar $plugins =\n" + json.dumps(entries) + ";\n",
            encoding="utf-8",
        )
    return root


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real user and project config files."""
    user_config = tmp_path / "home" / ".mzguard" / "config.yaml"
    monkeypatch.setattr("mzguard.core.config.USER_CONFIG_PATH", user_config)
    monkeypatch.setattr("mzguard.cli.main.USER_CONFIG_PATH", user_config)
    monkeypatch.chdir(tmp_path)
    return user_config


@pytest.fixture
def mz_project(tmp_path):
    """Three enabled plugins, two shared methods, healthy dependencies."""
    return write_project(
        tmp_path / "MyGame",
        {"CoreEngine": CORE_ENGINE, "BattleCore": BATTLE_CORE, "MyPatch": MY_PATCH},
        load_order=["CoreEngine", "BattleCore", "MyPatch"],
    )


@pytest.fixture
def popularity_file(tmp_path):
    """Enrichment-shaped popularity data: Game_Actor is popular, Game_Map is not."""
    path = tmp_path / "popularity.json"
    path.write_text(
        json.dumps({"version": "1", "classPopularity": {"Game_Actor": 31, "Game_Map": 5}}),
        encoding="utf-8",
    )
    return path
