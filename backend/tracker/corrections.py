"""Built-in correction tables (manually verified against IMDb)."""
from __future__ import annotations

import logging
from typing import Dict, Tuple

from .curation import Correction, Reidentify, Relabel, Remove, load_correction_table, only
from .settings import TrackerSettings

logger = logging.getLogger(__name__)

REMOVE = Remove()

# Titles that are not originals of a tracked platform, or were tagged with the
# wrong one.
PLATFORM_RULES: Dict[str, Correction] = {
    # Showtime
    "Dexter": REMOVE,
    "Californication": REMOVE,
    # BBC and other broadcasters
    "Peaky Blinders": REMOVE,
    "Sherlock": REMOVE,
    "Still Game": REMOVE,
    "Fraggle Rock": REMOVE,
    "Leyla and Mecnun": REMOVE,
    "Leyla ile Mecnun": REMOVE,
    # NBC
    "Parks and Recreation": REMOVE,
    "Friends": REMOVE,
    "Seinfeld": REMOVE,
    # AMC
    "Breaking Bad": REMOVE,
    # Licensed animation
    "Attack on Titan": REMOVE,
    "Avatar: The Last Airbender": REMOVE,
    "Death Note": REMOVE,
    "Fullmetal Alchemist: Brotherhood": REMOVE,
    "One Piece": REMOVE,
    "Cowboy Bebop": REMOVE,
    "Batman: The Animated Series": REMOVE,
    "Bleach: Thousand-Year Blood War": REMOVE,
    "Frieren: Beyond Journey's End": REMOVE,
    "Rick and Morty": REMOVE,
    # Prime Video
    "The Chosen": Relabel("amazon"),
    "Clarkson's Farm": Relabel("amazon"),
    "The Grand Tour": Relabel("amazon"),
    "Invincible": Relabel("amazon"),
    "The Marvelous Mrs. Maisel": Relabel("amazon"),
    "The Boys": Relabel("amazon"),
    "Reacher": Relabel("amazon"),
    "Fallout": Relabel("amazon"),
    "The Family Man": Relabel("amazon"),
    "Mirzapur": Relabel("amazon"),
    "Paatal Lok": Relabel("amazon"),
    "Breathe": Relabel("amazon"),
    "Bosch": Relabel("amazon"),
    "Bosch: Legacy": Relabel("amazon"),
    "The Expanse": Relabel("amazon"),
    "Upload": Relabel("amazon"),
    "Sneaky Pete": Relabel("amazon"),
    "Patriot": Relabel("amazon"),
    "Goliath": Relabel("amazon"),
    "Mozart in the Jungle": Relabel("amazon"),
    "Transparent": Relabel("amazon"),
    "Red Oaks": Relabel("amazon"),
    "Hunters": Relabel("amazon"),
    "The Underground Railroad": Relabel("amazon"),
    "A League of Their Own": Relabel("amazon"),
    "Carnival Row": Relabel("amazon"),
    "The Wheel of Time": Relabel("amazon"),
    "Citadel": Relabel("amazon"),
    "The Lord of the Rings: The Rings of Power": Relabel("amazon"),
    "The Peripheral": Relabel("amazon"),
    "Night Sky": Relabel("amazon"),
    "Outer Range": Relabel("amazon"),
    "Paper Girls": Relabel("amazon"),
    "The Wilds": Relabel("amazon"),
    "Forever": Relabel("amazon"),
    "Good Omens": Relabel("amazon"),
    "Hanna": Relabel("amazon"),
    "Homecoming": Relabel("amazon"),
    "Tales from the Loop": Relabel("amazon"),
    "The Summer I Turned Pretty": Relabel("amazon"),
    "Daisy Jones & The Six": Relabel("amazon"),
    "Dead Ringers": Relabel("amazon"),
    "Swarm": Relabel("amazon"),
    "Mr. & Mrs. Smith": Relabel("amazon"),
    "I Know What You Did Last Summer": Relabel("amazon"),
    # HBO / Max
    "True Blood": Relabel("hbo"),
    "Sex and the City": Relabel("hbo"),
    "Oz": Relabel("hbo"),
    "The Larry Sanders Show": Relabel("hbo"),
    "Entourage": Relabel("hbo"),
    "Carnivale": Relabel("hbo"),
    "Rome": Relabel("hbo"),
    "Deadwood": Relabel("hbo"),
    "Six Feet Under": Relabel("hbo"),
    "The Newsroom": Relabel("hbo"),
    "Boardwalk Empire": Relabel("hbo"),
    "Silicon Valley": Relabel("hbo"),
    "Big Little Lies": Relabel("hbo"),
    "Westworld": Relabel("hbo"),
    "Watchmen": Relabel("hbo"),
    "Euphoria": Relabel("hbo"),
    "The Leftovers": Relabel("hbo"),
    "Barry": Relabel("hbo"),
    "Succession": Relabel("hbo"),
    "The White Lotus": Relabel("hbo"),
    "White Lotus": Relabel("hbo"),
    "House of the Dragon": Relabel("hbo"),
    "The Last of Us": Relabel("hbo"),
    "The Penguin": Relabel("hbo"),
    "Hacks": Relabel("hbo"),
    "Peacemaker": Relabel("hbo"),
    "The Righteous Gemstones": Relabel("hbo"),
    "Perry Mason": Relabel("hbo"),
    "Industry": Relabel("hbo"),
    "Station Eleven": Relabel("hbo"),
    "Lovecraft Country": Relabel("hbo"),
    "The Plot Against America": Relabel("hbo"),
    "The Flight Attendant": Relabel("hbo"),
    "The Gilded Age": Relabel("hbo"),
    "Tokyo Vice": Relabel("hbo"),
    "A Very English Scandal": Relabel("hbo"),
    "The Regime": Relabel("hbo"),
    "The Sympathizer": Relabel("hbo"),
}

# Known-correct identifiers for titles whose stored id pointed at another page.
IDENTIFIER_RULES: Dict[str, Correction] = {
    "WeCrashed": Reidentify("tt12005128"),
    "Home Before Dark": Reidentify("tt8993814"),
    "Band of Brothers": Reidentify("tt0185906"),
    "The Sopranos": Reidentify("tt0141842"),
    "The Wire": Reidentify("tt0306414"),
    "Game of Thrones": Reidentify("tt0944947"),
    "Chernobyl": Reidentify("tt7366338"),
    "True Detective": Reidentify("tt2356777"),
    "Succession": Reidentify("tt7660850"),
    "The Last of Us": Reidentify("tt3581920"),
    "House of the Dragon": Reidentify("tt11198330"),
    "Westworld": Reidentify("tt0475784"),
    "Euphoria": Reidentify("tt8772296"),
    "Big Little Lies": Reidentify("tt3920596"),
    "Watchmen": Reidentify("tt7049682"),
    "Rome": Reidentify("tt0384766"),
    "Oz": Reidentify("tt0118421"),
    "Deadwood": Reidentify("tt0348914"),
    "Six Feet Under": Reidentify("tt0248654"),
    "Sex and the City": Reidentify("tt0159206"),
    "The Leftovers": Reidentify("tt2699128"),
    "Boardwalk Empire": Reidentify("tt0979432"),
    "True Blood": Reidentify("tt0844441"),
    "Entourage": Reidentify("tt0387764"),
    "Barry": Reidentify("tt5348176"),
    "Silicon Valley": Reidentify("tt2575988"),
    "Veep": Reidentify("tt1759761"),
    "Curb Your Enthusiasm": Reidentify("tt0264235"),
    "Mare of Easttown": Reidentify("tt10155688"),
    "The Gilded Age": Reidentify("tt4406178"),
    "Perry Mason": Reidentify("tt2077823"),
    "The Righteous Gemstones": Reidentify("tt7587890"),
    "Hacks": Reidentify("tt11815682"),
    "The Penguin": Reidentify("tt14452776"),
    "Peacemaker": Reidentify("tt10370710"),
    "Tokyo Vice": Reidentify("tt2887954"),
    "Industry": Reidentify("tt8398600"),
    "The Flight Attendant": Reidentify("tt7569576"),
    "Lovecraft Country": Reidentify("tt6905686"),
    "The Plot Against America": Reidentify("tt8423104"),
    "Station Eleven": Reidentify("tt10574236"),
    "Sharp Objects": Reidentify("tt2649356"),
    "The Newsroom": Reidentify("tt1870479"),
    "John Adams": Reidentify("tt0472027"),
    "Carnivale": Reidentify("tt0319969"),
    "Our Flag Means Death": Reidentify("tt11000902"),
    "Winning Time": Reidentify("tt9544034"),
    "White Lotus": Reidentify("tt13406094"),
    "The Larry Sanders Show": Reidentify("tt0103466"),
    "The Haunting of Hill House": Reidentify("tt6763664"),
}

# Titles whose last rating refresh failed; their ids are re-checked first.
RECHECK_TITLES: Tuple[str, ...] = (
    "Heartstopper",
    "As We See It",
    "Atypical",
    "Lessons in Chemistry",
    "Black Bird",
    "Dead to Me",
    "Little America",
    "Red Oaks",
    "Never Have I Ever",
    "A Very English Scandal",
    "Five Days at Memorial",
    "Shadow and Bone",
    "Hijack",
    "The Devil's Hour",
    "Outer Banks",
    "Ginny & Georgia",
    "Locke & Key",
    "Platonic",
    "Central Park",
    "Swagger",
    "The Plot Against America",
    "The Summer I Turned Pretty",
    "Sweet Home",
    "Physical",
    "Dear Edward",
    "Hello Tomorrow!",
    "The Big Door Prize",
    "Forever",
    "Outer Range",
    "Paper Girls",
    "The Wilds",
    "Ratched",
    "Three Pines",
    "Schmigadoon!",
    "Loot",
    "Shining Girls",
    "A League of Their Own",
    "Too Old to Die Young",
    "Truth Be Told",
    "Dead Ringers",
    "Surface",
    "Citadel",
    "Swarm",
    "The Essex Serpent",
    "High Desert",
    "The Sympathizer",
    "Suspicion",
    "City on Fire",
    "Liaison",
    "I Know What You Did Last Summer",
)

# Apple TV+ titles known to carry wrong ids; searched by title alone.
RESEARCH_TITLES: Tuple[str, ...] = (
    "City on Fire",
    "Liaison",
    "Suspicion",
    "High Desert",
    "The Essex Serpent",
    "The Changeling",
    "Surface",
    "Truth Be Told",
    "Extrapolations",
    "Loot",
    "Shining Girls",
    "Schmigadoon!",
    "Dear Edward",
    "Hello Tomorrow!",
    "The Big Door Prize",
    "Platonic",
    "Central Park",
    "Swagger",
    "Hijack",
    "Five Days at Memorial",
    "Home Before Dark",
    "Little America",
    "Black Bird",
)

# HBO series missing from the initial import: (title, identifier).
HBO_ADDITIONS: Tuple[Tuple[str, str], ...] = (
    ("Curb Your Enthusiasm", "tt0264235"),
    ("Veep", "tt1759761"),
    ("The Pacific", "tt0374463"),
    ("Eastbound & Down", "tt0866442"),
    ("In Treatment", "tt0834902"),
    ("Girls", "tt1723816"),
    ("The Night Of", "tt2401256"),
    ("Extras", "tt0496409"),
    ("Generation Kill", "tt1217624"),
    ("Big Love", "tt0421030"),
    ("Flight of the Conchords", "tt0863037"),
    ("Vice Principals", "tt4063800"),
    ("Ballers", "tt2891574"),
    ("Bored to Death", "tt1305826"),
    ("Looking", "tt2581458"),
)


def load_rules(settings: TrackerSettings) -> Dict[str, Correction]:
    """Return the platform rules merged with the removals and relabels of the rules file."""

    rules: Dict[str, Correction] = dict(PLATFORM_RULES)
    rules.update(only(_file_rules(settings), (Remove, Relabel)))
    return rules


def load_identifier_rules(settings: TrackerSettings) -> Dict[str, Correction]:
    rules: Dict[str, Correction] = dict(IDENTIFIER_RULES)
    rules.update(only(_file_rules(settings), Reidentify))
    return rules


def _file_rules(settings: TrackerSettings) -> Dict[str, Correction]:
    if not settings.rules_path:
        return {}
    overrides = load_correction_table(settings.rules_path)
    logger.info("Loaded %d corrections from %s", len(overrides), settings.rules_path)
    return overrides