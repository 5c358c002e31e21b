"""Lookup tables for quest NPCs and locations.

Every lookup has a documented default, so an unknown quest type, theme or
location name never raises:

  npc roster        unknown quest type  → "random" roster
  npc role          unknown npc type    → "General NPC"
  theme locations   unknown theme       → "Classic D&D"
  location type     no keyword in name  → "unknown"
  location text     unknown name        → generic description

Location types are matched by substring in table order ("Underground Bunker"
→ military), so the first keyword found wins.
"""

from collections.abc import Callable

from construct_engine.models import NPC, Location

DEFAULT_THEME = "Classic D&D"

# quest type → themes it may be offered under; types not listed never match
THEME_COMPATIBILITY: dict[str, list[str]] = {
    "side": ["Classic D&D", "Star Wars", "Post-Apocalyptic Wasteland"],
    "main": ["Classic D&D", "Modern Zombies", "Star Wars"],
    "random": ["Classic D&D", "Modern Zombies", "Star Wars", "Post-Apocalyptic Wasteland", "Custom"],
}

NPC_ROSTERS: dict[str, list[str]] = {
    "side": ["quest giver", "contact", "informant"],
    "main": ["patron", "mentor", "ally", "antagonist"],
    "random": ["merchant", "guard", "villager", "adventurer"],
}

NPC_EPITHETS = ["the Brave", "the Wise", "the Mysterious", "the Helpful"]

NPC_ROLES: dict[str, str] = {
    "quest giver": "Provides quests and information",
    "contact": "Has useful information about objectives",
    "informant": "Can provide rumors and clues",
    "patron": "Provides resources and support",
    "mentor": "Offers advice and training",
    "ally": "Helps in combat and exploration",
    "antagonist": "Opposes the player's goals",
    "merchant": "Buys and sells equipment",
    "guard": "Provides protection and information",
    "villager": "Source of rumors and local knowledge",
    "adventurer": "Possible ally or competitor",
}
DEFAULT_NPC_ROLE = "General NPC"

THEME_LOCATIONS: dict[str, list[str]] = {
    "Classic D&D": ["Ancient Temple", "Dark Forest", "Mountain Cave", "Abandoned Tower", "Hidden Valley"],
    "Modern Zombies": ["Abandoned Warehouse", "Underground Bunker", "City Ruins", "Military Base", "Subway System"],
    "Star Wars": ["Space Station", "Desert Planet", "Imperial Base", "Smugglers Den", "Ancient Ruins"],
    "Post-Apocalyptic Wasteland": ["Derelict Settlement", "Radiation Zone", "Military Bunker", "Trade Outpost", "Mutant Territory"],
}
LOCATIONS_PER_QUEST = 3
MAX_CONNECTIONS = 2

LOCATION_TYPES: dict[str, str] = {
    "Temple": "religious",
    "Cave": "natural",
    "Tower": "military",
    "Forest": "natural",
    "Warehouse": "industrial",
    "Bunker": "military",
    "Base": "military",
    "Den": "criminal",
    "Station": "industrial",
}
DEFAULT_LOCATION_TYPE = "unknown"

LOCATION_DESCRIPTIONS: dict[str, str] = {
    "Ancient Temple": "An old religious site with mysterious carvings and forgotten rituals.",
    "Dark Forest": "A dense woodland with twisted trees and hidden dangers.",
    "Mountain Cave": "A natural cavern system in the rugged mountains.",
    "Abandoned Tower": "A crumbling watchtower overlooking the surrounding landscape.",
    "Hidden Valley": "A secluded valley untouched by outside influences.",
    "Abandoned Warehouse": "Empty industrial building with remnants of its former purpose.",
    "Underground Bunker": "Subterranean shelter with military equipment and supplies.",
    "City Ruins": "Collapsed urban structures overgrown with vegetation.",
    "Military Base": "Fortified installation with security systems and vehicles.",
    "Subway System": "Underground transit network now home to various inhabitants.",
}
DEFAULT_LOCATION_DESCRIPTION = "An interesting location with potential for adventure."


def is_theme_compatible(quest_type: str, theme: str) -> bool:
    return theme in THEME_COMPATIBILITY.get(quest_type, [])


def npc_roster(quest_type: str) -> list[str]:
    return NPC_ROSTERS.get(quest_type, NPC_ROSTERS["random"])


def npc_role(npc_type: str) -> str:
    return NPC_ROLES.get(npc_type, DEFAULT_NPC_ROLE)


def npc_name(npc_type: str, index: int) -> str:
    """Capitalized type plus epithet: "quest giver", 0 → "Quest giver the Brave"."""
    return f"{npc_type[:1].upper()}{npc_type[1:]} {NPC_EPITHETS[index % len(NPC_EPITHETS)]}"


def theme_locations(theme: str) -> list[str]:
    return THEME_LOCATIONS.get(theme, THEME_LOCATIONS[DEFAULT_THEME])


def location_type(name: str) -> str:
    for keyword, kind in LOCATION_TYPES.items():
        if keyword in name:
            return kind
    return DEFAULT_LOCATION_TYPE


def location_description(name: str) -> str:
    return LOCATION_DESCRIPTIONS.get(name, DEFAULT_LOCATION_DESCRIPTION)


def generate_npcs(quest_type: str, id_factory: Callable[[], str]) -> list[NPC]:
    return [
        NPC(
            id=f"npc_{id_factory()}",
            type=npc_type,
            name=npc_name(npc_type, i),
            role=npc_role(npc_type),
        )
        for i, npc_type in enumerate(npc_roster(quest_type))
    ]


def generate_locations(theme: str, id_factory: Callable[[], str]) -> list[Location]:
    names = theme_locations(theme)[:LOCATIONS_PER_QUEST]
    return [
        Location(
            id=f"loc_{id_factory()}",
            name=name,
            type=location_type(name),
            description=location_description(name),
            connected_locations=[n for j, n in enumerate(names) if j != i][:MAX_CONNECTIONS],
        )
        for i, name in enumerate(names)
    ]
