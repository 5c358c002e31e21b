"""Tests for NPC and location lookup tables and their defaults."""

from construct_engine.quests import world


# ── NPCs ─────────────────────────────────────────────────


def test_side_quest_npcs(id_factory):
    npcs = world.generate_npcs("side", id_factory)
    assert [n.type for n in npcs] == ["quest giver", "contact", "informant"]
    assert npcs[0].name == "Quest giver the Brave"
    assert npcs[1].name == "Contact the Wise"
    assert npcs[2].name == "Informant the Mysterious"
    assert npcs[0].role == "Provides quests and information"


def test_main_quest_has_four_npcs(id_factory):
    npcs = world.generate_npcs("main", id_factory)
    assert len(npcs) == 4
    assert npcs[3].name == "Antagonist the Helpful"
    assert npcs[3].role == "Opposes the player's goals"


def test_unknown_type_uses_random_roster(id_factory):
    npcs = world.generate_npcs("custom", id_factory)
    assert [n.type for n in npcs] == ["merchant", "guard", "villager", "adventurer"]


def test_npcs_start_neutral_with_unique_ids(id_factory):
    npcs = world.generate_npcs("main", id_factory)
    assert all(n.disposition == "neutral" for n in npcs)
    assert all(n.last_interaction is None for n in npcs)
    assert len({n.id for n in npcs}) == 4
    assert npcs[0].id == "npc_1"


def test_unknown_npc_role_is_generic():
    assert world.npc_role("blacksmith") == "General NPC"


def test_npc_content_is_deterministic(id_factory):
    first = [(n.type, n.name, n.role) for n in world.generate_npcs("random", id_factory)]
    second = [(n.type, n.name, n.role) for n in world.generate_npcs("random", id_factory)]
    assert first == second


# ── Locations ────────────────────────────────────────────


def test_three_locations_from_theme(id_factory):
    locs = world.generate_locations("Modern Zombies", id_factory)
    assert [loc.name for loc in locs] == ["Abandoned Warehouse", "Underground Bunker", "City Ruins"]
    assert [loc.type for loc in locs] == ["industrial", "military", "unknown"]


def test_unknown_theme_falls_back_to_classic(id_factory):
    locs = world.generate_locations("Fantasy Noir", id_factory)
    assert [loc.name for loc in locs] == ["Ancient Temple", "Dark Forest", "Mountain Cave"]


def test_connections_exclude_self(id_factory):
    locs = world.generate_locations("Classic D&D", id_factory)
    assert locs[0].connected_locations == ["Dark Forest", "Mountain Cave"]
    assert locs[1].connected_locations == ["Ancient Temple", "Mountain Cave"]
    for loc in locs:
        assert loc.name not in loc.connected_locations
        assert len(loc.connected_locations) <= 2


def test_locations_start_unexplored(id_factory):
    locs = world.generate_locations("Star Wars", id_factory)
    assert all(not loc.explored and loc.discoveries == [] for loc in locs)


def test_location_type_substring_match():
    assert world.location_type("Smugglers Den") == "criminal"
    assert world.location_type("Imperial Base") == "military"
    assert world.location_type("Space Station") == "industrial"
    assert world.location_type("Hidden Valley") == "unknown"


def test_location_description_exact_lookup():
    assert world.location_description("Dark Forest").startswith("A dense woodland")
    assert world.location_description("Desert Planet") == (
        "An interesting location with potential for adventure."
    )


# ── Theme compatibility ──────────────────────────────────


def test_theme_compatibility_table():
    assert world.is_theme_compatible("side", "Star Wars")
    assert not world.is_theme_compatible("side", "Modern Zombies")
    assert world.is_theme_compatible("random", "Custom")
    assert not world.is_theme_compatible("custom", "Classic D&D")
