"""Developer Tools: formatters, encoders, hashes and parsers."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote
import base64
import binascii
import hashlib
import json
import re
import uuid

from jose import jwt
from jose.exceptions import JWTError

from tools.registry import register
from tools.inputs import PremiumRequiredError, get_bool, get_choice, get_int, get_str

MAX_REGEX_MATCHES = 1000


# ============================================================================
# Formatting & encoding
# ============================================================================

@register("json-formatter")
def json_formatter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "json", required=True, label="JSON to format")
    mode = get_choice(inputs, "mode", ("format", "minify"), "format")
    indent = get_int(inputs, "indent", 2, minimum=0, maximum=8)

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})")

    if mode == "minify":
        output = json.dumps(parsed, separators=(",", ":"), ensure_ascii=False)
    else:
        output = json.dumps(parsed, indent=indent, ensure_ascii=False)
    return {"mode": mode, "output": output, "valid": True}


HASH_ALGORITHMS = {
    "MD5": hashlib.md5,
    "SHA-1": hashlib.sha1,
    "SHA-256": hashlib.sha256,
    "SHA-512": hashlib.sha512,
}


@register("hash-generator")
def hash_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    data = text.encode("utf-8")
    return {"hashes": {name: algorithm(data).hexdigest() for name, algorithm in HASH_ALGORITHMS.items()}}


@register("base64-encoder-decoder")
def base64_converter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    mode = get_choice(inputs, "mode", ("encode", "decode"), "encode")

    if mode == "encode":
        return {"mode": mode, "output": base64.b64encode(text.encode("utf-8")).decode("ascii")}

    try:
        decoded = base64.b64decode(text.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise ValueError("Invalid Base64 input")
    return {"mode": mode, "output": decoded}


HTML_ENTITIES = [
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
]


def html_encode(text: str) -> str:
    for char, entity in HTML_ENTITIES:
        text = text.replace(char, entity)
    return text


def html_decode(text: str) -> str:
    for char, entity in reversed(HTML_ENTITIES):
        text = text.replace(entity, char)
    return text


@register("html-encoder-decoder")
def html_encoder_decoder(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    mode = get_choice(inputs, "mode", ("encode", "decode"), "encode")
    output = html_encode(text) if mode == "encode" else html_decode(text)
    return {"mode": mode, "output": output}


# Characters encodeURIComponent leaves alone besides alphanumerics
URI_COMPONENT_SAFE = "-_.!~*'()"
MALFORMED_ESCAPE = re.compile(r"%(?![0-9a-fA-F]{2})")


@register("url-encoder-decoder")
def url_encoder_decoder(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text")
    mode = get_choice(inputs, "mode", ("encode", "decode"), "encode")

    if mode == "encode":
        return {"mode": mode, "output": quote(text, safe=URI_COMPONENT_SAFE)}

    if MALFORMED_ESCAPE.search(text):
        raise ValueError("Invalid URL-encoded input: malformed escape sequence")
    try:
        decoded = unquote(text, errors="strict")
    except UnicodeDecodeError:
        raise ValueError("Invalid URL-encoded input: not valid UTF-8")
    return {"mode": mode, "output": decoded}


# ============================================================================
# Regex, UUIDs and number bases
# ============================================================================

@register("regex-tester")
def regex_tester(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    pattern = get_str(inputs, "pattern", required=True, label="a regular expression")
    text = get_str(inputs, "text")
    flags = get_str(inputs, "flags", "g")

    unknown = set(flags) - set("gim")
    if unknown:
        raise ValueError(f"Unsupported regex flags: {''.join(sorted(unknown))}")

    re_flags = 0
    if "i" in flags:
        re_flags |= re.IGNORECASE
    if "m" in flags:
        re_flags |= re.MULTILINE
    try:
        compiled = re.compile(pattern, re_flags)
    except re.error as e:
        raise ValueError(f"Invalid regular expression: {e}")

    matches: List[Dict[str, Any]] = []
    for match in compiled.finditer(text):
        matches.append({
            "match": match.group(0),
            "index": match.start(),
            "groups": list(match.groups()),
            "named_groups": match.groupdict(),
        })
        if "g" not in flags or len(matches) >= MAX_REGEX_MATCHES:
            break

    return {"pattern": pattern, "flags": flags, "match_count": len(matches), "matches": matches}


@register("uuid-generator")
def uuid_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    count = get_int(inputs, "count", 1, minimum=1, maximum=10)
    if count > 1 and not premium:
        raise PremiumRequiredError("bulk UUID generation")
    uppercase = get_bool(inputs, "uppercase", False)

    uuids = [str(uuid.uuid4()) for _ in range(count)]
    if uppercase:
        uuids = [value.upper() for value in uuids]
    return {"uuids": uuids, "count": count, "version": 4}


BASES = {"2": 2, "8": 8, "10": 10, "16": 16}


def _to_base(value: int, base: int) -> str:
    if base == 10:
        return str(value)
    sign = "-" if value < 0 else ""
    digits = {2: "b", 8: "o", 16: "x"}[base]
    return sign + format(abs(value), digits)


@register("number-base-converter")
def number_base_converter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    value = get_str(inputs, "value", required=True, label="a number").strip()
    from_base = BASES[get_choice(inputs, "from_base", tuple(BASES), "10")]
    to_base = BASES[get_choice(inputs, "to_base", tuple(BASES), "2")]

    try:
        number = int(value, from_base)
    except ValueError:
        raise ValueError(f"Invalid number for base {from_base}")

    return {
        "decimal_value": number,
        "output": _to_base(number, to_base),
        "conversions": {
            "binary": _to_base(number, 2),
            "octal": _to_base(number, 8),
            "decimal": _to_base(number, 10),
            "hexadecimal": _to_base(number, 16).upper(),
        },
    }


# ============================================================================
# Tokens, colors and user agents
# ============================================================================

def _timestamp(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return None


@register("jwt-decoder")
def jwt_decoder(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    token = get_str(inputs, "token", required=True, label="a JWT token").strip()
    if len(token.split(".")) != 3:
        raise ValueError("Invalid JWT format. A token must have three parts.")

    try:
        header = jwt.get_unverified_header(token)
        payload = jwt.get_unverified_claims(token)
    except JWTError as e:
        raise ValueError(f"Invalid JWT: {e}")

    result = {
        "header": header,
        "payload": payload,
        "signature": token.split(".")[2],
    }
    for claim in ("exp", "iat", "nbf"):
        rendered = _timestamp(payload.get(claim))
        if rendered:
            result[f"{claim}_at"] = rendered

    exp = payload.get("exp")
    if isinstance(exp, (int, float)) and not isinstance(exp, bool):
        result["expired"] = exp < datetime.now(timezone.utc).timestamp()
    else:
        result["expired"] = None
    return result


HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
RGB_COLOR = re.compile(r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$", re.IGNORECASE)


def hex_to_rgb(value: str):
    match = HEX_COLOR.match(value.strip())
    if not match:
        raise ValueError("Invalid hex color. Use #RGB or #RRGGBB.")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#{:02x}{:02x}{:02x}".format(r, g, b)


@register("hex-rgb-converter")
def hex_rgb_converter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    value = get_str(inputs, "value", required=True, label="a color").strip()
    mode = get_choice(inputs, "mode", ("hex-to-rgb", "rgb-to-hex"), "hex-to-rgb")

    if mode == "hex-to-rgb":
        r, g, b = hex_to_rgb(value)
    else:
        match = RGB_COLOR.match(value)
        if not match:
            raise ValueError("Invalid RGB color. Use rgb(r, g, b).")
        r, g, b = (int(part) for part in match.groups())
        if any(c > 255 for c in (r, g, b)):
            raise ValueError("RGB components must be between 0 and 255")

    return {
        "hex": rgb_to_hex(r, g, b),
        "rgb": f"rgb({r}, {g}, {b})",
        "r": r,
        "g": g,
        "b": b,
    }


# First matching rule wins, so more specific browsers come first
BROWSER_RULES = [
    ("Edge", re.compile(r"Edg(?:e|A|iOS)?/([\d.]+)")),
    ("Opera", re.compile(r"(?:OPR|Opera)/([\d.]+)")),
    ("Samsung Internet", re.compile(r"SamsungBrowser/([\d.]+)")),
    ("Firefox", re.compile(r"(?:Firefox|FxiOS)/([\d.]+)")),
    ("Chrome", re.compile(r"(?:Chrome|CriOS)/([\d.]+)")),
    ("Safari", re.compile(r"Version/([\d.]+).*Safari/")),
    ("Internet Explorer", re.compile(r"(?:MSIE |Trident/.*rv:)([\d.]+)")),
]

OS_RULES = [
    ("Windows Phone", re.compile(r"Windows Phone(?: OS)? ([\d.]+)")),
    ("Windows", re.compile(r"Windows NT ([\d.]+)")),
    ("iOS", re.compile(r"(?:iPhone|iPad|iPod).*? OS ([\d_]+)")),
    ("macOS", re.compile(r"Mac OS X ([\d_.]+)")),
    ("Android", re.compile(r"Android ([\d.]+)")),
    ("Chrome OS", re.compile(r"CrOS \S+ ([\d.]+)")),
    ("Linux", re.compile(r"Linux()")),
]

WINDOWS_VERSIONS = {"10.0": "10/11", "6.3": "8.1", "6.2": "8", "6.1": "7", "6.0": "Vista", "5.1": "XP"}

ENGINE_RULES = [
    ("EdgeHTML", re.compile(r"Edge/([\d.]+)")),
    ("Blink", re.compile(r"(?:Chrome|CriOS)/([\d.]+)")),
    ("Gecko", re.compile(r"rv:([\d.]+)\) Gecko/")),
    ("Trident", re.compile(r"Trident/([\d.]+)")),
    ("Presto", re.compile(r"Presto/([\d.]+)")),
    ("WebKit", re.compile(r"AppleWebKit/([\d.]+)")),
]

TABLET = re.compile(r"tablet|ipad|playbook|silk|android(?!.*mobile)", re.IGNORECASE)
MOBILE = re.compile(
    r"mobile|iphone|ipod|android|blackberry|fennec|opera m(?:ob|in)i|windows (?:ce|phone)|symbian",
    re.IGNORECASE,
)
BOT = re.compile(r"bot|crawler|spider|slurp", re.IGNORECASE)


def _first_match(rules, ua: str) -> Dict[str, str]:
    for name, pattern in rules:
        match = pattern.search(ua)
        if match:
            return {"name": name, "version": match.group(1).replace("_", ".")}
    return {"name": "Unknown", "version": ""}


def parse_user_agent(ua: str) -> Dict[str, Any]:
    browser = _first_match(BROWSER_RULES, ua)
    os_info = _first_match(OS_RULES, ua)
    if os_info["name"] == "Windows":
        os_info["version"] = WINDOWS_VERSIONS.get(os_info["version"], os_info["version"])

    if BOT.search(ua):
        device = "Bot"
    elif TABLET.search(ua):
        device = "Tablet"
    elif MOBILE.search(ua):
        device = "Mobile"
    else:
        device = "Desktop"

    return {
        "browser": browser,
        "os": os_info,
        "device": {"type": device},
        "engine": _first_match(ENGINE_RULES, ua),
    }


@register("user-agent-parser")
def user_agent_parser(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    ua = get_str(inputs, "user_agent", required=True, label="a user agent string").strip()
    return {"user_agent": ua, **parse_user_agent(ua)}
