"""Teaching activity suggestions.

Asks the configured LLM provider for ideas. When no API key is set, or the
provider call fails, an offline suggestion is assembled from a small
built-in catalogue keyed by class level and activity area, so teachers
always get something usable.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from preprimary.core.domain import CLASS_AGES, ClassLevel
from preprimary.llm.client import LLMClient, LLMConfig, LLMError
from preprimary.prompts.registry import get_prompt

logger = structlog.get_logger(__name__)

MAX_PROMPT_LENGTH = 2000

# Activity areas, checked in this order against the lower-cased prompt
AREA_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("literacy", ("literacy", "reading", "writing", "letter", "story")),
    ("numeracy", ("math", "number", "counting", "numeracy", "shape")),
    ("motor", ("motor", "physical", "movement")),
    ("social", ("social", "emotional", "feeling", "friend")),
]

AREA_TITLES = {
    "literacy": "pre-literacy activities",
    "numeracy": "pre-numeracy activities",
    "motor": "motor skill activities",
    "social": "social-emotional activities",
    "general": "general activities",
}

OFFLINE_CATALOGUE: dict[tuple[ClassLevel | None, str], list[str]] = {
    (ClassLevel.NURSERY, "literacy"): [
        "Picture Book Talk: look at bright picture books together and name objects, colours and actions.",
        "Rhyme Circle: sing short action rhymes daily, in English and Nepali.",
        "Letter of the Week: trace one letter in sand, shape it in dough, hunt for things that start with it.",
        "Puppet Stories: tell simple stories with hand puppets and let children repeat key lines.",
        "Name Cards: match each child's photo to a card with their written name at arrival.",
    ],
    (ClassLevel.NURSERY, "numeracy"): [
        "Counting Songs: use finger-counting songs up to five.",
        "Sorting Trays: sort buttons, blocks or leaves by colour and size.",
        "Number Hunt: hide cards 1-5 around the room and name each one found.",
        "Step Counting: count steps aloud on the way to the playground.",
        "Calendar Time: count the days on a simple picture calendar.",
    ],
    (ClassLevel.NURSERY, "general"): [
        "Sensory Bins: scoop and pour rice or beans to build fine motor control.",
        "Nature Collage: collect leaves and flowers on a short walk and glue them into a collage.",
        "Follow the Leader: simple movement games for listening and gross motor skills.",
        "Colour Hunt: pick a colour of the day and find objects that match it.",
        "Friendship Circle: greet each classmate by name every morning.",
    ],
    (ClassLevel.LKG, "literacy"): [
        "Sound Spy: 'I spy something that starts with /b/'.",
        "Story Sequencing: order three picture cards from a familiar story.",
        "Rhyming Pairs: match rhyming picture cards such as cat-hat.",
        "Name Writing: write names with chalk, crayons or clay letters.",
        "Word Family Houses: build -at and -an words by swapping the first letter.",
    ],
    (ClassLevel.LKG, "numeracy"): [
        "Number Formation: form 1-10 in sand or with water and brushes.",
        "Move and Count: count claps, hops and jumps.",
        "One More: add one object to a small group and draw the result.",
        "Shape Walk: find circles, squares and triangles around the school.",
        "Measure It: compare lengths using blocks or paper clips.",
    ],
    (ClassLevel.LKG, "general"): [
        "Role Play Corners: a shop, home or clinic corner with simple props.",
        "Pattern Strings: extend red-blue-red-blue bead patterns.",
        "Sharing Puppets: model turn-taking and kind words with puppets.",
        "Float or Sink: predict and test with everyday objects.",
        "Festival Days: explore Nepali festivals through songs, food and clothing.",
    ],
    (ClassLevel.UKG, "literacy"): [
        "Sound Blending: blend c-a-t, d-o-g, s-u-n into words.",
        "Story Makers: children dictate a story from picture prompts.",
        "Word Building: make regular words with letter cards.",
        "Reading Response: draw a favourite part of a story and write one sentence.",
        "Print Walk: build a word wall from signs and labels around the school.",
    ],
    (ClassLevel.UKG, "numeracy"): [
        "Number Bonds: find different ways to make 10 with counters.",
        "Picture Graphs: graph favourite fruits and compare more, less and equal.",
        "Class Shop: buy and sell with play rupees priced 1-10.",
        "Number Writing: practise writing 1-20 with correct formation.",
        "Growing Patterns: predict the next step in 1, 2, 3 block towers.",
    ],
    (ClassLevel.UKG, "general"): [
        "Community Helpers: learn about local helpers through visits and role play.",
        "Problem Solving: discuss fair ways to share or include everyone in a game.",
        "Group Mural: each child adds a part to a shared painting.",
        "Memory Games: matching cards with a growing number of pairs.",
        "Sentence Tracing: trace and copy short sentences about class experiences.",
    ],
    (None, "general"): [
        "Weather Chart: record the weather each day with simple symbols.",
        "Show and Tell: each child describes an item brought from home.",
        "Music and Movement: traditional Nepali songs with actions.",
        "Drama Time: act out familiar stories and everyday situations.",
        "Fine Motor Stations: threading beads, tweezers, cutting and tracing lines.",
    ],
}


@dataclass
class Suggestion:
    """A suggestion and where it came from ("ai" or "offline")."""

    text: str
    source: str


def detect_class_level(prompt: str) -> ClassLevel | None:
    """Find the class a prompt refers to, if any."""
    lowered = prompt.lower()
    for level in ClassLevel:
        if level.value.lower() in lowered:
            return level
    return None


def detect_area(prompt: str) -> str:
    """Find the activity area a prompt refers to ("general" if none)."""
    lowered = prompt.lower()
    for area, keywords in AREA_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return area
    return "general"


def offline_suggestion(prompt: str, class_level: ClassLevel | None = None) -> str:
    """Build a suggestion from the built-in catalogue."""
    level = class_level or detect_class_level(prompt)
    area = detect_area(prompt)

    activities = OFFLINE_CATALOGUE.get((level, area))
    if activities is None and level is not None:
        # No area-specific list for this class: use its general list
        area = "general"
        activities = OFFLINE_CATALOGUE[(level, "general")]
    if activities is None:
        level, area = None, "general"
        activities = OFFLINE_CATALOGUE[(None, "general")]

    if level is None:
        audience = "pre-primary students"
    else:
        audience = f"{level.value} students (age {CLASS_AGES[level]})"

    lines = [f"Here are some {AREA_TITLES[area]} for {audience}:", ""]
    lines.extend(f"{number}. {activity}" for number, activity in enumerate(activities, 1))
    return "\n".join(lines)


def _class_context(class_level: ClassLevel | None) -> str:
    if class_level is None:
        return ""
    return f"Class: {class_level.value} (around {CLASS_AGES[class_level]} years old).\n"


def get_suggestion(
    prompt: str,
    class_level: ClassLevel | str | None = None,
    client: LLMClient | None = None,
) -> Suggestion:
    """Get teaching activity suggestions for prompt.

    Args:
        prompt: Teacher's request, e.g. "counting games for LKG"
        class_level: Class to target (detected from prompt if omitted)
        client: LLM client (built from config if omitted)

    Returns:
        Suggestion with source "ai", or "offline" when the provider is not
        configured or fails

    Raises:
        ValueError: If prompt is empty or too long
    """
    prompt = (prompt or "").strip()
    if not prompt:
        raise ValueError("Prompt is required")
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise ValueError(f"Prompt must be at most {MAX_PROMPT_LENGTH} characters")

    level = ClassLevel(class_level) if class_level else detect_class_level(prompt)

    if client is None:
        config = LLMConfig.from_app_config()
        if not config.has_credentials:
            logger.warning("suggestions.no_api_key", provider=config.provider)
            return Suggestion(text=offline_suggestion(prompt, level), source="offline")
        client = LLMClient(config)

    system_prompt = get_prompt("suggestions/system")
    user_message = get_prompt(
        "suggestions/user", class_context=_class_context(level), prompt=prompt
    )

    try:
        text = client.simple_chat(system_prompt, user_message)
    except LLMError as e:
        logger.error("suggestions.llm_failed", error=str(e))
        return Suggestion(text=offline_suggestion(prompt, level), source="offline")

    logger.info("suggestions.generated", class_level=level.value if level else None)
    return Suggestion(text=text.strip(), source="ai")
