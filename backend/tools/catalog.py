"""ToolHub catalog: categories, tool metadata and premium flags.

Single source of truth for which tools exist and which are locked behind the
Pro plan. A tool is premium when its category is premium or it appears in
PREMIUM_TOOLS.
"""
from typing import Dict, List, Optional


CATEGORIES: List[Dict] = [
    {
        "slug": "financial-wizards",
        "title": "Financial Wizards",
        "description": "Master your money with smart, simple calculators for every goal",
        "premium": False,
        "tools": [
            "roi-calculator",
            "loan-emi-calculator",
            "simple-interest-calculator",
            "investment-return-calculator",
            "retirement-corpus-calculator",
            "tax-calculator",
            "break-even-point-calculator",
            "percentage-calculator",
            "currency-conversion",
            "savings-goal-calculator",
            "compound-interest-calculator",
        ],
    },
    {
        "slug": "developer-tools",
        "title": "Developer Tools",
        "description": "Power-packed utilities every coder will love. Debug, decode, and build faster",
        "premium": False,
        "tools": [
            "json-formatter",
            "hash-generator",
            "base64-encoder-decoder",
            "regex-tester",
            "uuid-generator",
            "number-base-converter",
            "jwt-decoder",
            "html-encoder-decoder",
            "url-encoder-decoder",
            "user-agent-parser",
            "hex-rgb-converter",
        ],
    },
    {
        "slug": "design-generators",
        "title": "Design Generators",
        "description": "Create stunning visuals, from gradients to QR codes, in seconds",
        "premium": True,
        "tools": [
            "qr-generator",
            "color-palette-generator",
            "css-gradient-generator",
            "glassmorphism-generator",
            "pattern-generator",
            "blob-generator",
            "neumorphism-generator",
            "box-shadow-generator",
            "border-radius-generator",
            "spacing-grid-generator",
        ],
    },
    {
        "slug": "text-and-content",
        "title": "Text & Content",
        "description": "Clean, count, convert, and transform text like a pro",
        "premium": False,
        "tools": [
            "word-counter",
            "lorem-ipsum-generator",
            "case-converter",
            "text-reverser",
            "text-cleaner",
            "text-randomizer",
            "list-sorter",
            "line-counter",
            "reading-time-estimator",
            "find-replace-tool",
        ],
    },
    {
        "slug": "business-documents",
        "title": "Business Documents",
        "description": "Generate invoices, receipts, and reports professionally and instantly",
        "premium": False,
        "tools": [
            "invoice-generator",
            "receipt-maker",
            "expense-report-generator",
            "timesheet-generator",
            "work-schedule-maker",
            "quotation-generator",
            "purchase-order-generator",
            "meeting-minutes-generator",
            "business-card-maker",
        ],
    },
    {
        "slug": "math-and-engineering",
        "title": "Math & Engineering",
        "description": "Solve, convert, and calculate with precision. Perfect for students and engineers",
        "premium": False,
        "tools": [
            "scientific-calculator",
            "unit-converter",
            "bmi-calculator",
            "area-calculator",
            "volume-calculator",
            "triangle-solver",
            "ohms-law-calculator",
            "snr-calculator",
            "frequency-wavelength-converter",
        ],
    },
    {
        "slug": "marketing-tools",
        "title": "Marketing Tools",
        "description": "Optimize performance with UTM links, A/B testing, CTR tools, and more",
        "premium": True,
        "tools": [
            "utm-builder",
            "meta-tag-generator",
            "ab-test-significance-calculator",
            "ctr-calculator",
            "roi-calculator-marketing",
            "engagement-rate-calculator",
            "keyword-density-analyzer",
            "slug-generator",
        ],
    },
    {
        "slug": "date-and-time",
        "title": "Date & Time",
        "description": "From countdowns to moon phases, everything time-related in one place",
        "premium": False,
        "tools": [
            "date-calculator",
            "age-calculator",
            "world-clock",
            "countdown-timer",
            "stopwatch",
            "pomodoro-timer",
            "day-finder",
            "moon-phase-viewer",
            "time-zone-converter",
        ],
    },
]

# Individually locked tools inside free categories (plus a few that are
# already covered by a premium category)
PREMIUM_TOOLS = frozenset([
    "tax-calculator",
    "currency-conversion",
    "loan-emi-calculator",
    "countdown-timer",
    "pomodoro-timer",
    "day-finder",
    "moon-phase-viewer",
    "scientific-calculator",
    "bmi-calculator",
    "unit-converter",
    "reading-time-estimator",
    "text-cleaner",
    "list-sorter",
    "find-replace-tool",
    "qr-generator",
    "glassmorphism-generator",
    "pattern-generator",
    "regex-tester",
    "jwt-decoder",
    "number-base-converter",
    "user-agent-parser",
    "ab-test-significance-calculator",
    "ctr-calculator",
    "roi-calculator-marketing",
    "engagement-rate-calculator",
    "keyword-density-analyzer",
    "expense-report-generator",
    "timesheet-generator",
    "work-schedule-maker",
    "purchase-order-generator",
    "invoice-generator",
    "business-card-maker",
])

DEFAULT_DESCRIPTION = "A useful tool to help with your tasks"

TOOL_DESCRIPTIONS: Dict[str, str] = {
    "case-converter": "Convert text between upper, lower, title and sentence case",
    "find-replace-tool": "Find and replace text with plain or regex patterns",
    "line-counter": "Count lines, paragraphs and words per line",
    "list-sorter": "Sort, trim and de-duplicate lists",
    "reading-time-estimator": "Estimate how long your text takes to read",
    "text-cleaner": "Strip extra spaces, empty lines, HTML and special characters",
    "text-randomizer": "Shuffle words, letters or paragraphs",
    "text-reverser": "Reverse entire text, lines, or words.",
    "qr-generator": "Create QR codes for URLs, text, contact info and more",
    "color-palette-generator": "Explore and create beautiful color palettes for your designs",
    "css-gradient-generator": "Build linear and radial CSS gradients",
    "glassmorphism-generator": "Generate frosted-glass CSS panels",
    "pattern-generator": "Generate repeating CSS background patterns",
    "blob-generator": "Generate organic SVG blob shapes",
    "neumorphism-generator": "Generate soft-UI neumorphic shadows",
    "box-shadow-generator": "Build CSS box shadows",
    "border-radius-generator": "Build CSS border radius rules",
    "spacing-grid-generator": "Generate CSS grid containers with gutters",
    "hash-generator": "Generate cryptographic hashes from your input text",
    "json-formatter": "Format and validate JSON data with syntax highlighting",
    "base64-encoder-decoder": "Encode and decode text in Base64 format",
    "regex-tester": "Test regular expressions with live matching",
    "uuid-generator": "Create v4 UUIDs",
    "number-base-converter": "Convert between binary, decimal, octal, and hex",
    "jwt-decoder": "Decode header & payload (no verification)",
    "html-encoder-decoder": "Encode/decode HTML entities",
    "url-encoder-decoder": "URI encode/decode tool",
    "hex-rgb-converter": "Convert color codes between HEX and RGB formats",
    "user-agent-parser": "Parse browser UA strings into readable format",
    "compound-interest-calculator": "Calculate how your investments grow over time",
    "utm-builder": "Generate trackable URLs with customizable UTM parameters",
    "meta-tag-generator": "Create SEO/meta tags (Open Graph, Twitter Cards, etc.)",
    "ab-test-significance-calculator": "Calculate p-value, confidence interval, conversion rates, and test result significance",
    "ctr-calculator": "Calculate Click-Through Rate with a performance rating",
    "roi-calculator-marketing": "Calculate ROI from revenue and cost",
    "engagement-rate-calculator": "Social media engagement rate calculator with a quality scale",
    "keyword-density-analyzer": "Analyze keywords from content for SEO",
    "slug-generator": "Convert titles/headlines into SEO-friendly slugs",
    "roi-calculator": "Measure return on investment for your business projects",
    "loan-emi-calculator": "Calculate monthly payments for your loans",
    "simple-interest-calculator": "Calculate simple interest on principal amount",
    "investment-return-calculator": "Project future value of your investments",
    "retirement-corpus-calculator": "Plan your retirement savings goal",
    "tax-calculator": "Estimate your income tax liabilities",
    "break-even-point-calculator": "Determine when your business becomes profitable",
    "percentage-calculator": "Calculate percentages, increases and decreases",
    "currency-conversion": "Convert between world currencies with live rates",
    "savings-goal-calculator": "Plan how to reach your financial goals",
    "lorem-ipsum-generator": "Generate placeholder text for your designs",
    "word-counter": "Count words, characters and reading time in your text",
    "date-calculator": "Add/subtract days, weekdays only mode, or measure between dates",
    "age-calculator": "Exact age in years, months and days with next birthday countdown",
    "world-clock": "Current time across cities with a 12/24hr toggle",
    "countdown-timer": "Time remaining until a target moment",
    "stopwatch": "Lap splits with fastest and slowest laps",
    "pomodoro-timer": "Plan work/break cycles with a stats summary",
    "day-finder": "Find the weekday, week number and day of year for any date",
    "moon-phase-viewer": "Moon phase, illumination and next full/new moon",
    "time-zone-converter": "Convert a moment between two time zones",
    "bmi-calculator": "Calculate your Body Mass Index with health category indicators",
    "unit-converter": "Convert between different units of measurement",
    "area-calculator": "Calculate area for various geometric shapes",
    "scientific-calculator": "Advanced calculator with scientific functions",
    "volume-calculator": "Calculate volume for 3D shapes and containers",
    "triangle-solver": "Solve for unknown sides/angles of triangles",
    "ohms-law-calculator": "Calculate voltage, current, resistance using Ohm's Law",
    "snr-calculator": "Calculate signal-to-noise ratio for audio/electronic systems",
    "frequency-wavelength-converter": "Convert between frequency and wavelength",
    "invoice-generator": "Professional invoice generator with customizable templates",
    "receipt-maker": "Create receipts for transactions with company branding",
    "expense-report-generator": "Generate detailed expense reports for reimbursement",
    "timesheet-generator": "Create timesheets for employee time tracking",
    "work-schedule-maker": "Plan and generate work schedules for teams",
    "quotation-generator": "Create professional quotes for clients",
    "purchase-order-generator": "Generate purchase orders for vendors",
    "meeting-minutes-generator": "Document meeting details and action items",
    "business-card-maker": "Design professional business cards",
}

_TOOL_CATEGORY: Dict[str, Dict] = {
    slug: category for category in CATEGORIES for slug in category["tools"]
}


def tool_name(slug: str) -> str:
    """'loan-emi-calculator' -> 'Loan EMI Calculator'."""
    acronyms = {"roi", "emi", "json", "uuid", "jwt", "html", "url", "qr", "css", "bmi", "snr", "utm", "ctr", "ab", "rgb"}
    words = []
    for word in slug.split("-"):
        words.append(word.upper() if word in acronyms else word.capitalize())
    return " ".join(words)


def get_category(slug: str) -> Optional[Dict]:
    for category in CATEGORIES:
        if category["slug"] == slug:
            return category
    return None


def get_tool_category(tool_slug: str) -> Optional[Dict]:
    return _TOOL_CATEGORY.get(tool_slug)


def is_premium_tool(tool_slug: str) -> bool:
    category = _TOOL_CATEGORY.get(tool_slug)
    if category and category["premium"]:
        return True
    return tool_slug in PREMIUM_TOOLS


def describe_tool(tool_slug: str) -> Optional[Dict]:
    category = _TOOL_CATEGORY.get(tool_slug)
    if not category:
        return None
    return {
        "slug": tool_slug,
        "name": tool_name(tool_slug),
        "description": TOOL_DESCRIPTIONS.get(tool_slug, DEFAULT_DESCRIPTION),
        "category": category["slug"],
        "premium": is_premium_tool(tool_slug),
    }
