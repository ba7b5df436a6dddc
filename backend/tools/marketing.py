"""Marketing Tools (premium category)."""
from collections import Counter
from html import escape
from typing import Any, Dict, List
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit
import math
import re
import unicodedata

from tools.registry import register
from tools.inputs import get_bool, get_choice, get_int, get_number, get_str, round_to, table

TITLE_MAX_LENGTH = 60
DESCRIPTION_MAX_LENGTH = 160
SIGNIFICANCE_LEVEL = 0.05
Z_95 = 1.959964

STOP_WORDS = frozenset("""
a about above after again against all am an and any are as at be because been before being below
between both but by can could did do does doing down during each few for from further had has have
having he her here hers herself him himself his how i if in into is it its itself just me more most
my myself no nor not now of off on once only or other our ours ourselves out over own same she
should so some such than that the their theirs them themselves then there these they this those
through to too under until up very was we were what when where which while who whom why will with
would you your yours yourself yourselves
""".split())


# ============================================================================
# Links & metadata
# ============================================================================

@register("utm-builder")
def utm_builder(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    base_url = get_str(inputs, "url", required=True, label="a website URL").strip()
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError("Please enter a valid URL starting with http:// or https://")

    params = {
        "utm_source": get_str(inputs, "source", required=True, label="a campaign source").strip(),
        "utm_medium": get_str(inputs, "medium", required=True, label="a campaign medium").strip(),
        "utm_campaign": get_str(inputs, "campaign", required=True, label="a campaign name").strip(),
    }
    for key in ("term", "content"):
        value = get_str(inputs, key).strip()
        if value:
            params[f"utm_{key}"] = value

    # Existing query parameters are kept, UTM values win on conflict
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
    query.extend(params.items())
    url = urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
    return {"url": url, "parameters": params}


@register("meta-tag-generator")
def meta_tag_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    title = get_str(inputs, "title", required=True, label="a page title").strip()
    description = get_str(inputs, "description").strip()
    keywords = get_str(inputs, "keywords").strip()
    url = get_str(inputs, "url").strip()
    image = get_str(inputs, "image").strip()
    card = get_choice(inputs, "twitter_card", ("summary", "summary_large_image"), "summary_large_image")

    e = escape
    html_tags = [f"<title>{e(title)}</title>", f'<meta name="title" content="{e(title)}">']
    if description:
        html_tags.append(f'<meta name="description" content="{e(description)}">')
    if keywords:
        html_tags.append(f'<meta name="keywords" content="{e(keywords)}">')

    og_tags = ['<meta property="og:type" content="website">', f'<meta property="og:title" content="{e(title)}">']
    twitter_tags = [f'<meta name="twitter:card" content="{card}">', f'<meta name="twitter:title" content="{e(title)}">']
    if url:
        og_tags.append(f'<meta property="og:url" content="{e(url)}">')
        twitter_tags.append(f'<meta name="twitter:url" content="{e(url)}">')
    if description:
        og_tags.append(f'<meta property="og:description" content="{e(description)}">')
        twitter_tags.append(f'<meta name="twitter:description" content="{e(description)}">')
    if image:
        og_tags.append(f'<meta property="og:image" content="{e(image)}">')
        twitter_tags.append(f'<meta name="twitter:image" content="{e(image)}">')

    warnings = []
    if len(title) > TITLE_MAX_LENGTH:
        warnings.append(f"Title is {len(title)} characters; keep it under {TITLE_MAX_LENGTH}")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        warnings.append(f"Description is {len(description)} characters; keep it under {DESCRIPTION_MAX_LENGTH}")

    return {
        "html": "\n".join(html_tags + og_tags + twitter_tags),
        "meta_tags": html_tags,
        "open_graph_tags": og_tags,
        "twitter_tags": twitter_tags,
        "title_length": len(title),
        "description_length": len(description),
        "warnings": warnings,
    }


def slugify(text: str, separator: str = "-", max_length: int = 0) -> str:
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", separator, folded.lower()).strip(separator)
    if max_length and len(slug) > max_length:
        cut = slug[:max_length]
        # Prefer ending on a whole word
        if slug[max_length:max_length + 1] not in ("", separator) and separator in cut:
            cut = cut.rsplit(separator, 1)[0]
        slug = cut.strip(separator)
    return slug


@register("slug-generator")
def slug_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text", required=True, label="some text to convert")
    separator = get_choice(inputs, "separator", ("-", "_", "."), "-")
    max_length = get_int(inputs, "max_length", 0, minimum=0, maximum=500, label="max length")
    slug = slugify(text, separator, max_length)
    return {"slug": slug, "length": len(slug)}


# ============================================================================
# Campaign metrics
# ============================================================================

def _normal_cdf(z: float) -> float:
    return 0.5 * (1 + math.erf(z / math.sqrt(2)))


@register("ab-test-significance-calculator", exports=("csv", "pdf"))
def ab_test_significance(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    visitors_a = get_int(inputs, "visitors_a", minimum=1, label="visitors for A")
    conversions_a = get_int(inputs, "conversions_a", minimum=0, label="conversions for A")
    visitors_b = get_int(inputs, "visitors_b", minimum=1, label="visitors for B")
    conversions_b = get_int(inputs, "conversions_b", minimum=0, label="conversions for B")
    if conversions_a > visitors_a or conversions_b > visitors_b:
        raise ValueError("Conversions cannot exceed visitors")

    rate_a = conversions_a / visitors_a
    rate_b = conversions_b / visitors_b
    pooled = (conversions_a + conversions_b) / (visitors_a + visitors_b)
    pooled_se = math.sqrt(pooled * (1 - pooled) * (1 / visitors_a + 1 / visitors_b))

    if pooled_se == 0:
        z_score = 0.0
        p_value = 1.0
    else:
        z_score = (rate_b - rate_a) / pooled_se
        p_value = 2 * (1 - _normal_cdf(abs(z_score)))

    diff = rate_b - rate_a
    se = math.sqrt(rate_a * (1 - rate_a) / visitors_a + rate_b * (1 - rate_b) / visitors_b)
    uplift = (diff / rate_a * 100) if rate_a > 0 else None
    significant = p_value < SIGNIFICANCE_LEVEL

    result = {
        "conversion_rate_a": round_to(rate_a * 100),
        "conversion_rate_b": round_to(rate_b * 100),
        "relative_uplift": round_to(uplift) if uplift is not None else None,
        "z_score": round_to(z_score, 4),
        "p_value": round_to(p_value, 4),
        "confidence_interval": [round_to((diff - Z_95 * se) * 100), round_to((diff + Z_95 * se) * 100)],
        "significant": significant,
        "winner": ("B" if diff > 0 else "A") if significant else None,
    }
    result["table"] = table(
        ["Variant", "Visitors", "Conversions", "Conversion Rate (%)"],
        [
            ["A", visitors_a, conversions_a, result["conversion_rate_a"]],
            ["B", visitors_b, conversions_b, result["conversion_rate_b"]],
        ],
    )
    return result


def _rate(value: float, bands) -> str:
    for threshold, label in bands:
        if value >= threshold:
            return label
    return bands[-1][1]


@register("ctr-calculator")
def ctr_calculator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    clicks = get_number(inputs, "clicks", non_negative=True)
    impressions = get_number(inputs, "impressions", positive=True)
    if clicks > impressions:
        raise ValueError("Clicks cannot exceed impressions")

    ctr = clicks / impressions * 100
    rating = _rate(ctr, [(5, "Excellent"), (2, "Good"), (1, "Average"), (0, "Poor")])
    return {"ctr": round_to(ctr), "rating": rating}


@register("roi-calculator-marketing")
def marketing_roi(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    revenue = get_number(inputs, "revenue", non_negative=True)
    cost = get_number(inputs, "cost", positive=True, label="campaign cost")

    profit = revenue - cost
    return {
        "roi": round_to(profit / cost * 100),
        "profit": round_to(profit),
        "is_profitable": profit > 0,
        "status": "Profit" if profit > 0 else ("Break-even" if profit == 0 else "Loss"),
    }


@register("engagement-rate-calculator")
def engagement_rate(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    likes = get_number(inputs, "likes", 0, non_negative=True)
    comments = get_number(inputs, "comments", 0, non_negative=True)
    shares = get_number(inputs, "shares", 0, non_negative=True)
    saves = get_number(inputs, "saves", 0, non_negative=True)
    followers = get_number(inputs, "followers", positive=True)

    interactions = likes + comments + shares + saves
    rate = interactions / followers * 100
    rating = _rate(rate, [(6, "Excellent"), (3, "Good"), (1, "Average"), (0, "Low")])
    return {"engagement_rate": round_to(rate), "total_engagements": int(interactions), "rating": rating}


@register("keyword-density-analyzer", exports=("csv", "pdf"))
def keyword_density(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text", required=True, label="some content to analyze")
    top_n = get_int(inputs, "top", 10, minimum=1, maximum=100, label="number of keywords")
    exclude_stop_words = get_bool(inputs, "exclude_stop_words", True)

    words: List[str] = re.findall(r"[a-z0-9]+(?:'[a-z]+)?", text.lower())
    total = len(words)
    if total == 0:
        raise ValueError("No words found in the content")

    candidates = [w for w in words if not (exclude_stop_words and w in STOP_WORDS)]
    keywords = [
        {"keyword": word, "count": count, "density": round_to(count / total * 100)}
        for word, count in Counter(candidates).most_common(top_n)
    ]

    phrases = Counter(
        f"{a} {b}" for a, b in zip(words, words[1:])
        if not (exclude_stop_words and (a in STOP_WORDS or b in STOP_WORDS))
    )
    top_phrases = [
        {"phrase": phrase, "count": count, "density": round_to(count / total * 100)}
        for phrase, count in phrases.most_common(top_n) if count > 1
    ]

    return {
        "total_words": total,
        "unique_words": len(set(words)),
        "keywords": keywords,
        "phrases": top_phrases,
        "table": table(
            ["Keyword", "Count", "Density (%)"],
            [[k["keyword"], k["count"], k["density"]] for k in keywords],
        ),
    }
