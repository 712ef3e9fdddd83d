"""Free-text command parsing.

parse_command(raw_input) -> ParsedCommand turns a line of player input into
a canonical verb plus optional noun, preposition and indirect object. It
knows nothing about the world; the router decides what the words mean.
"""

from dataclasses import dataclass

# Surface verb → canonical verb
VERB_SYNONYMS: dict[str, str] = {
    # Movement
    "go": "go",
    "walk": "go",
    "run": "go",
    "move": "go",
    "travel": "go",
    "head": "go",
    "enter": "go",
    "exit": "go",
    "n": "go",
    "north": "go",
    "s": "go",
    "south": "go",
    "e": "go",
    "east": "go",
    "w": "go",
    "west": "go",
    "u": "go",
    "up": "go",
    "d": "go",
    "down": "go",
    "climb": "climb",
    "jump": "jump",
    "swim": "swim",
    "dive": "dive",
    # Examination
    "look": "look",
    "l": "look",
    "examine": "examine",
    "x": "examine",
    "inspect": "examine",
    "read": "read",
    "search": "search",
    "listen": "listen",
    "smell": "smell",
    "taste": "taste",
    # Manipulation
    "take": "take",
    "get": "take",
    "grab": "take",
    "pick": "take",
    "pickup": "take",
    "drop": "drop",
    "leave": "drop",
    "put": "put",
    "place": "put",
    "insert": "insert",
    "remove": "remove",
    "wear": "equip",
    "equip": "equip",
    "wield": "equip",
    "unequip": "unequip",
    "unwield": "unequip",
    "doff": "unequip",
    # Interaction
    "open": "open",
    "close": "close",
    "shut": "close",
    "lock": "lock",
    "unlock": "unlock",
    "push": "push",
    "pull": "pull",
    "turn": "turn",
    "rotate": "turn",
    "switch": "turn",
    "break": "break",
    "smash": "break",
    "hit": "attack",
    "attack": "attack",
    "fight": "attack",
    "kill": "attack",
    "stab": "attack",
    "strike": "attack",
    "touch": "touch",
    "rub": "rub",
    # Use
    "use": "use",
    "light": "light",
    "ignite": "light",
    "extinguish": "extinguish",
    "douse": "extinguish",
    "burn": "burn",
    "pour": "pour",
    "fill": "fill",
    "drink": "drink",
    "eat": "eat",
    "throw": "throw",
    "toss": "throw",
    "raise": "raise",
    "lower": "lower",
    "ring": "ring",
    "knock": "knock",
    "press": "press",
    "wave": "wave",
    "tie": "tie",
    "untie": "untie",
    # Communication
    "say": "say",
    "speak": "say",
    "shout": "shout",
    "yell": "shout",
    "ask": "ask",
    "tell": "tell",
    "talk": "talk",
    "pray": "pray",
    "cast": "cast",
    # Meta
    "think": "think",
    "wait": "wait",
    "z": "wait",
    "sleep": "sleep",
    "rest": "rest",
    "inventory": "inventory",
    "i": "inventory",
    "inv": "inventory",
    "help": "help",
    "?": "help",
    "save": "save",
    "load": "load",
    "restore": "load",
    "quit": "quit",
    "q": "quit",
    "restart": "restart",
    "reset": "restart",
    "status": "status",
    "stats": "status",
    "score": "score",
    "map": "map",
    "hint": "hint",
    "hints": "hint",
}

# Bare direction words that stand for "go <direction>"
DIRECTIONS: dict[str, str] = {
    "n": "north",
    "north": "north",
    "s": "south",
    "south": "south",
    "e": "east",
    "east": "east",
    "w": "west",
    "west": "west",
    "u": "up",
    "up": "up",
    "d": "down",
    "down": "down",
}

PREPOSITIONS = (
    "in", "into", "on", "onto", "with", "using", "to", "at",
    "from", "off", "under", "behind", "through", "about", "around",
)

DETERMINERS = frozenset({"a", "an", "the", "some", "my"})

MAX_SUGGESTIONS = 10


@dataclass
class ParsedCommand:
    verb: str
    raw: str
    valid: bool = True
    noun: str | None = None
    preposition: str | None = None
    indirect_object: str | None = None
    error_message: str | None = None


def _split_objects(tokens: list[str]) -> tuple[str | None, str | None, str | None]:
    """Split object tokens at the first preposition.

    Returns (noun, preposition, indirect_object). Only the first preposition
    counts; any later one stays in the indirect object text.
    """
    for index, token in enumerate(tokens):
        if token in PREPOSITIONS:
            if index == 0:
                return " ".join(tokens[1:]) or None, token, None
            noun = " ".join(tokens[:index])
            indirect = " ".join(tokens[index + 1:]) or None
            return noun, token, indirect
    return " ".join(tokens), None, None


def parse_command(raw_input: str) -> ParsedCommand:
    """Parse a line of player input."""
    normalized = raw_input.strip().lower()
    if not normalized:
        return ParsedCommand(
            verb="", raw=raw_input, valid=False,
            error_message="Please enter a command.",
        )

    tokens = normalized.split()
    first = tokens[0]

    if first in DIRECTIONS:
        return ParsedCommand(verb="go", noun=DIRECTIONS[first], raw=raw_input)

    verb = VERB_SYNONYMS.get(first)
    if verb is None:
        return ParsedCommand(
            verb=first, raw=raw_input, valid=False,
            error_message=f'I don\'t know how to "{first}".',
        )

    rest = tokens[1:]
    # "pick up the lamp"
    if first == "pick" and rest and rest[0] == "up":
        rest = rest[1:]

    object_tokens = [t for t in rest if t not in DETERMINERS]
    if not object_tokens:
        return ParsedCommand(verb=verb, raw=raw_input)

    noun, preposition, indirect = _split_objects(object_tokens)
    return ParsedCommand(
        verb=verb,
        raw=raw_input,
        noun=noun or None,
        preposition=preposition,
        indirect_object=indirect,
    )


def get_suggestions(partial: str) -> list[str]:
    """Synonym-table words starting with the partial input, for completion."""
    partial = partial.strip().lower()
    if not partial:
        return []
    matches = [word for word in VERB_SYNONYMS if word.startswith(partial)]
    return matches[:MAX_SUGGESTIONS]


def get_valid_verbs() -> list[str]:
    """Every canonical verb, sorted, for help display."""
    return sorted(set(VERB_SYNONYMS.values()))
