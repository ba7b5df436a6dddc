"""Text & Content tools."""
from typing import Any, Dict, List
import math
import random
import re

from tools.registry import register
from tools.inputs import get_bool, get_choice, get_int, get_str, round_to, seeded_random

WORDS_PER_MINUTE = 200

LOREM_OPENING = ["Lorem", "ipsum", "dolor", "sit", "amet"]
LOREM_WORDS = [
    "lorem", "ipsum", "dolor", "sit", "amet", "consectetur", "adipiscing", "elit",
    "sed", "do", "eiusmod", "tempor", "incididunt", "ut", "labore", "et", "dolore",
    "magna", "aliqua", "enim", "ad", "minim", "veniam", "quis", "nostrud",
    "exercitation", "ullamco", "laboris", "nisi", "aliquip", "ex", "ea", "commodo",
    "consequat", "duis", "aute", "irure", "in", "reprehenderit", "voluptate",
    "velit", "esse", "cillum", "fugiat", "nulla", "pariatur", "excepteur", "sint",
    "occaecat", "cupidatat", "non", "proident", "sunt", "culpa", "qui", "officia",
    "deserunt", "mollit", "anim", "id", "est", "laborum", "at", "vero", "eos",
    "accusamus", "iusto", "odio", "dignissimos", "ducimus", "blanditiis",
    "praesentium", "voluptatum", "deleniti", "atque", "corrupti", "quos",
    "dolores", "quas", "molestias", "excepturi", "occaecati", "cupiditate",
    "similique", "expedita", "distinctio", "nam", "libero", "tempore", "cum",
    "soluta", "nobis", "eleifend", "option", "congue", "nihil", "imperdiet",
    "doming", "placerat", "facer", "possim", "assum", "typi", "habent",
    "claritatem", "insitam", "processus", "dynamicus", "sequitur", "mutationem",
    "consuetudium", "lectorum", "mirum", "notare", "quam", "littera", "gothica",
]

LOREM_LIMITS = {"words": 1000, "sentences": 100, "paragraphs": 50}

PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
TRAILING_PUNCTUATION = re.compile(r"([.,!?;:]+)$")


def _words(text: str) -> List[str]:
    return text.split()


def _paragraphs(text: str) -> List[str]:
    return [p for p in PARAGRAPH_SPLIT.split(text) if p.strip()]


# ============================================================================
# Counting
# ============================================================================

@register("word-counter")
def word_counter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    words = len(_words(text))
    sentences = len([s for s in re.split(r"[.!?]+", text) if s.strip()])
    return {
        "characters": len(text),
        "characters_no_spaces": len(re.sub(r"\s", "", text)),
        "words": words,
        "sentences": sentences,
        "paragraphs": len(_paragraphs(text)),
        "reading_time_minutes": math.ceil(words / WORDS_PER_MINUTE),
    }


@register("line-counter")
def line_counter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    lines = text.split("\n") if text else []
    non_empty = [line for line in lines if line.strip()]
    word_total = sum(len(_words(line)) for line in non_empty)
    return {
        "total_lines": len(lines),
        "non_empty_lines": len(non_empty),
        "empty_lines": len(lines) - len(non_empty),
        "paragraphs": len(_paragraphs(text)),
        "average_words_per_line": round_to(word_total / len(non_empty)) if non_empty else 0,
    }


@register("reading-time-estimator")
def reading_time(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text", required=True, label="some text to analyze")
    wpm = get_int(inputs, "words_per_minute", WORDS_PER_MINUTE, minimum=50, maximum=1000,
                  label="reading speed")
    words = len(_words(text))
    total_seconds = round(words / wpm * 60)
    return {
        "words": words,
        "words_per_minute": wpm,
        "minutes": total_seconds // 60,
        "seconds": total_seconds % 60,
        "total_minutes": round_to(words / wpm),
    }


# ============================================================================
# Generators
# ============================================================================

def _lorem_sentence(rng: random.Random, opening: bool) -> str:
    length = rng.randint(8, 17)
    words = list(LOREM_OPENING) if opening else []
    while len(words) < length:
        words.append(rng.choice(LOREM_WORDS))
    words[0] = words[0][:1].upper() + words[0][1:]
    return " ".join(words) + "."


@register("lorem-ipsum-generator")
def lorem_ipsum(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    unit = get_choice(inputs, "unit", tuple(LOREM_LIMITS), "paragraphs")
    count = get_int(inputs, "count", 3, minimum=1, maximum=LOREM_LIMITS[unit])
    start_with_lorem = get_bool(inputs, "start_with_lorem", True)
    rng = seeded_random(inputs)

    if unit == "words":
        words = list(LOREM_OPENING) if start_with_lorem else []
        while len(words) < count:
            words.append(rng.choice(LOREM_WORDS))
        text = " ".join(words[:count]) + "."
    elif unit == "sentences":
        text = " ".join(_lorem_sentence(rng, i == 0 and start_with_lorem) for i in range(count))
    else:
        paragraphs = []
        for i in range(count):
            sentences = [
                _lorem_sentence(rng, i == 0 and j == 0 and start_with_lorem)
                for j in range(rng.randint(3, 6))
            ]
            paragraphs.append(" ".join(sentences))
        text = "\n\n".join(paragraphs)

    return {"text": text, "unit": unit, "count": count, "words": len(_words(text))}


# ============================================================================
# Transformations
# ============================================================================

def _title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))


def _sentence_case(text: str) -> str:
    return re.sub(r"(^|\.\s*)([a-z])", lambda m: m.group(1) + m.group(2).upper(), text.lower())


CASE_CONVERSIONS = {
    "upper": str.upper,
    "lower": str.lower,
    "title": _title_case,
    "sentence": _sentence_case,
    "capitalize": lambda text: re.sub(r"\b\w", lambda m: m.group(0).upper(), text, flags=re.ASCII),
}


@register("case-converter")
def case_converter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    mode = get_choice(inputs, "mode", tuple(CASE_CONVERSIONS), "upper")
    return {"mode": mode, "text": CASE_CONVERSIONS[mode](text)}


def _reverse_words(text: str, preserve_punctuation: bool) -> str:
    tokens = re.split(r"(\s+)", text)
    word_slots = [i for i, token in enumerate(tokens) if token and not token.isspace()]
    words = [tokens[i] for i in word_slots]

    if not preserve_punctuation:
        return "".join(reversed(tokens))

    # Punctuation stays attached to its position, the bare words move
    punctuation = []
    bare = []
    for word in words:
        match = TRAILING_PUNCTUATION.search(word)
        punctuation.append(match.group(1) if match and match.start() > 0 else "")
        bare.append(word[:len(word) - len(punctuation[-1])])
    bare.reverse()

    for slot, word, mark in zip(word_slots, bare, punctuation):
        tokens[slot] = word + mark
    return "".join(tokens)


@register("text-reverser")
def text_reverser(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    mode = get_choice(inputs, "mode", ("characters", "words", "lines"), "characters")
    preserve_punctuation = get_bool(inputs, "preserve_punctuation", False)

    if mode == "characters":
        reversed_text = text[::-1]
    elif mode == "words":
        reversed_text = _reverse_words(text, preserve_punctuation)
    else:
        reversed_text = "\n".join(reversed(text.split("\n")))
    return {"mode": mode, "text": reversed_text}


@register("text-cleaner")
def text_cleaner(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    cleaned = text
    applied = []

    if get_bool(inputs, "remove_html", False):
        cleaned = re.sub(r"<[^>]*>", "", cleaned)
        applied.append("remove_html")
    if get_bool(inputs, "remove_special_characters", False):
        cleaned = re.sub(r"[^a-zA-Z0-9\s.,!?;:]", "", cleaned)
        applied.append("remove_special_characters")
    if get_bool(inputs, "remove_empty_lines", False):
        cleaned = re.sub(r"\n\s*\n", "\n", cleaned)
        applied.append("remove_empty_lines")
    if get_bool(inputs, "remove_extra_spaces", True):
        cleaned = re.sub(r"[ \t]+", " ", cleaned)
        cleaned = re.sub(r" *\n *", "\n", cleaned)
        applied.append("remove_extra_spaces")
    if get_bool(inputs, "trim", True):
        cleaned = cleaned.strip()
        applied.append("trim")

    return {
        "text": cleaned,
        "applied": applied,
        "original_length": len(text),
        "cleaned_length": len(cleaned),
        "characters_removed": len(text) - len(cleaned),
    }


@register("text-randomizer")
def text_randomizer(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text", required=True, label="some text to randomize")
    mode = get_choice(inputs, "mode", ("words", "letters", "paragraphs"), "words")
    rng = seeded_random(inputs)

    if mode == "words":
        tokens = re.split(r"(\s+)", text)
        slots = [i for i, token in enumerate(tokens) if token and not token.isspace()]
        words = [tokens[i] for i in slots]
        rng.shuffle(words)
        for slot, word in zip(slots, words):
            tokens[slot] = word
        shuffled = "".join(tokens)
    elif mode == "letters":
        def shuffle_word(match):
            letters = list(match.group(0))
            rng.shuffle(letters)
            return "".join(letters)
        shuffled = re.sub(r"\S+", shuffle_word, text)
    else:
        paragraphs = _paragraphs(text)
        rng.shuffle(paragraphs)
        shuffled = "\n\n".join(p.strip() for p in paragraphs)

    return {"mode": mode, "text": shuffled}


def _numeric_key(item: str):
    try:
        return (0, float(item), item)
    except ValueError:
        return (1, 0.0, item)


@register("list-sorter")
def list_sorter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    order = get_choice(inputs, "order", ("ascending", "descending"), "ascending")
    mode = get_choice(inputs, "mode", ("alphabetical", "case-insensitive", "numeric"), "alphabetical")

    items = text.split("\n") if text else []
    original_count = len(items)
    if get_bool(inputs, "trim", True):
        items = [item.strip() for item in items]
    if get_bool(inputs, "remove_empty", True):
        items = [item for item in items if item.strip()]
    if get_bool(inputs, "remove_duplicates", False):
        seen = set()
        unique = []
        for item in items:
            key = item.lower() if mode == "case-insensitive" else item
            if key not in seen:
                seen.add(key)
                unique.append(item)
        items = unique

    if mode == "numeric":
        key = _numeric_key
    elif mode == "case-insensitive":
        key = lambda item: (item.lower(), item)  # noqa: E731
    else:
        key = None
    items = sorted(items, key=key, reverse=order == "descending")

    return {
        "items": items,
        "text": "\n".join(items),
        "count": len(items),
        "removed": original_count - len(items),
    }


@register("find-replace-tool")
def find_replace(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    find = get_str(inputs, "find", required=True, label="text to find")
    replacement = get_str(inputs, "replace", "")
    use_regex = get_bool(inputs, "use_regex", False)
    match_case = get_bool(inputs, "match_case", False)
    whole_word = get_bool(inputs, "whole_word", False)

    pattern = find if use_regex else re.escape(find)
    if whole_word:
        pattern = rf"\b(?:{pattern})\b"
    flags = 0 if match_case else re.IGNORECASE
    try:
        compiled = re.compile(pattern, flags)
    except re.error as e:
        raise ValueError(f"Invalid regular expression: {e}")

    if use_regex:
        try:
            new_text, count = compiled.subn(replacement, text)
        except re.error as e:
            raise ValueError(f"Invalid replacement pattern: {e}")
    else:
        new_text, count = compiled.subn(lambda _: replacement, text)
    return {"text": new_text, "replacements": count}
