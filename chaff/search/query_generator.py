"""搜索词生成器。

由主题分类表、修饰词表和模板随机拼出看起来自然的搜索词。
分类到主题的映射是一张静态表，分类本身不携带行为。
"""

import random
from collections.abc import Iterable
from enum import Enum


class TopicCategory(str, Enum):
    """搜索主题分类。"""

    COOKING = "cooking"
    FITNESS = "fitness"
    CREATIVE = "creative"
    TECH = "tech"
    LIFESTYLE = "lifestyle"
    LEARNING = "learning"
    OUTDOOR = "outdoor"
    TRAVEL = "travel"
    FINANCE = "finance"
    HOME = "home"
    ENTERTAINMENT = "entertainment"
    FASHION = "fashion"
    SPORTS = "sports"
    SCIENCE = "science"
    AUTOMOTIVE = "automotive"
    PETS = "pets"
    MUSIC = "music"
    GAMING = "gaming"
    DIY = "diy"
    WELLNESS = "wellness"


TOPICS: dict[TopicCategory, list[str]] = {
    TopicCategory.COOKING: [
        "recipe", "baking", "cooking", "nutrition", "meal prep", "food photography",
        "culinary arts", "wine pairing", "fermentation", "sous vide", "grilling",
        "vegan cooking", "pastry", "sourdough", "meal planning",
    ],
    TopicCategory.FITNESS: [
        "fitness", "yoga", "running", "cycling", "swimming", "meditation", "health",
        "strength training", "HIIT", "pilates", "marathon training", "CrossFit",
        "calisthenics", "stretching", "cardio",
    ],
    TopicCategory.CREATIVE: [
        "painting", "drawing", "photography", "writing", "music", "pottery", "knitting",
        "sculpture", "calligraphy", "watercolor", "digital art", "sketching",
        "illustration", "printmaking", "ceramics",
    ],
    TopicCategory.TECH: [
        "coding", "technology", "gaming", "AI", "web development", "apps",
        "cybersecurity", "machine learning", "blockchain", "data science",
        "cloud computing", "programming", "software engineering", "3D printing",
    ],
    TopicCategory.LIFESTYLE: [
        "fashion", "interior design", "gardening", "minimalism", "organizing",
        "home decor", "sustainable living", "zero waste", "apartment living",
        "feng shui", "decluttering", "productivity",
    ],
    TopicCategory.LEARNING: [
        "language learning", "education", "books", "history", "science", "psychology",
        "philosophy", "online courses", "studying techniques", "memory improvement",
        "speed reading", "public speaking",
    ],
    TopicCategory.OUTDOOR: [
        "hiking", "camping", "fishing", "birdwatching", "travel", "wildlife",
        "backpacking", "rock climbing", "kayaking", "trail running", "mountaineering",
        "nature photography", "foraging", "astronomy",
    ],
    TopicCategory.TRAVEL: [
        "travel planning", "budget travel", "solo travel", "cultural experiences",
        "language immersion", "street food", "travel photography", "backpacking",
        "luxury travel", "road trips", "cruise travel", "adventure travel",
    ],
    TopicCategory.FINANCE: [
        "investing", "personal finance", "budgeting", "cryptocurrency", "stock market",
        "real estate", "retirement planning", "passive income",
        "financial independence", "credit cards", "tax strategies", "wealth building",
    ],
    TopicCategory.HOME: [
        "home improvement", "gardening", "landscaping", "furniture", "power tools",
        "plumbing", "electrical work", "woodworking", "home renovation", "smart home",
        "lawn care", "composting",
    ],
    TopicCategory.ENTERTAINMENT: [
        "movies", "TV shows", "streaming", "podcasts", "stand-up comedy", "theater",
        "concerts", "festivals", "book clubs", "board games", "trivia",
        "documentary films",
    ],
    TopicCategory.FASHION: [
        "fashion trends", "personal style", "makeup", "skincare", "hair care",
        "nail art", "sustainable fashion", "vintage clothing", "accessories",
        "streetwear", "luxury brands", "beauty routines",
    ],
    TopicCategory.SPORTS: [
        "basketball", "football", "soccer", "tennis", "golf", "baseball", "hockey",
        "volleyball", "martial arts", "boxing", "surfing", "skateboarding",
        "snowboarding", "fencing",
    ],
    TopicCategory.SCIENCE: [
        "physics", "chemistry", "biology", "astronomy", "geology",
        "environmental science", "neuroscience", "genetics", "quantum mechanics",
        "space exploration", "climate science", "oceanography",
    ],
    TopicCategory.AUTOMOTIVE: [
        "car maintenance", "auto repair", "electric vehicles", "classic cars",
        "motorcycles", "car detailing", "performance tuning", "road trips",
        "car reviews", "automotive technology",
    ],
    TopicCategory.PETS: [
        "dog training", "cat care", "aquarium", "bird keeping", "pet nutrition",
        "veterinary care", "pet photography", "animal behavior", "exotic pets",
        "pet grooming", "rescue animals",
    ],
    TopicCategory.MUSIC: [
        "guitar", "piano", "drums", "music theory", "singing", "music production",
        "DJ techniques", "songwriting", "vinyl records", "concert photography",
        "music history", "instrument repair",
    ],
    TopicCategory.GAMING: [
        "video games", "esports", "game reviews", "streaming", "retro gaming",
        "game development", "speedrunning", "gaming PC builds", "console gaming",
        "indie games", "game collecting",
    ],
    TopicCategory.DIY: [
        "woodworking", "home crafts", "upcycling", "jewelry making", "sewing",
        "embroidery", "leather crafting", "soap making", "candle making", "resin art",
        "paper crafts", "model building",
    ],
    TopicCategory.WELLNESS: [
        "meditation", "mindfulness", "mental health", "stress relief", "sleep hygiene",
        "breathwork", "journaling", "aromatherapy", "sound healing", "life coaching",
        "self-care", "gratitude practice",
    ],
}

ADJECTIVES = [
    "best", "new", "popular", "amazing", "creative", "unique", "modern", "simple",
    "advanced", "beginner", "professional", "innovative", "practical", "useful",
    "comprehensive", "quick", "easy", "fun", "sustainable", "effective", "top",
    "ultimate", "essential", "trending", "proven", "expert", "premium", "affordable",
    "recommended", "complete", "detailed", "step-by-step", "beginner-friendly",
    "powerful", "efficient", "time-saving", "budget", "luxury", "minimalist",
    "eco-friendly", "organic", "natural", "scientific", "evidence-based",
    "traditional", "contemporary", "classic", "cutting-edge", "revolutionary",
    "game-changing", "life-changing", "inspiring",
]

OBJECTS = [
    "tips", "ideas", "guide", "tutorial", "examples", "techniques", "benefits",
    "methods", "basics", "secrets", "advice", "practices", "projects", "resources",
    "tools", "strategies", "fundamentals", "hacks", "tricks", "lessons", "courses",
    "workshops", "books", "videos", "podcasts", "articles", "reviews", "comparisons",
    "recommendations", "mistakes to avoid", "for beginners", "checklist", "routine",
    "setup", "equipment", "supplies", "inspiration", "trends", "statistics", "facts",
    "myths", "misconceptions", "challenges", "solutions", "case studies",
    "experiments", "research", "studies", "analysis", "breakdown", "deep dive",
    "overview",
]

VERB_PHRASES = [
    "how to start", "how to improve", "how to master", "how to learn",
    "how to get better at", "ways to enhance", "steps to improve",
    "guide to understanding", "introduction to", "getting started with",
    "improving your", "mastering the art of", "understanding", "exploring",
    "discovering", "learning about", "developing skills in", "becoming better at",
    "what you need to know about", "everything about", "the ultimate guide to",
    "complete beginner's guide to",
]

TEMPLATES = [
    "{adjective} {topic} {obj}",
    "{verb} {topic}",
    "{topic} for beginners",
    "{topic} {obj} {year}",
    "best {topic} {obj}",
    "{adjective} {topic} techniques",
    "why {topic} is important",
    "benefits of {topic}",
    "{topic} mistakes to avoid",
    "advanced {topic} {obj}",
    "{adjective} ways to improve {topic}",
    "{topic} vs alternatives",
    "is {topic} worth it",
    "{topic} for professionals",
    "budget {topic} {obj}",
    "{topic} inspiration and {obj}",
    "common {topic} problems",
    "{topic} equipment and supplies",
    "latest {topic} trends",
    "{adjective} {topic} routine",
]

FALLBACK_QUERY = "interesting facts"


def generate_query(
    enabled: Iterable[TopicCategory],
    year: int,
    rng: random.Random | None = None,
) -> str:
    """生成一个搜索词。

    Args:
        enabled: 启用的主题分类
        year: 模板中使用的年份
        rng: 随机数源

    Returns:
        str: 搜索词；没有启用任何分类时返回固定的兜底词
    """
    rng = rng or random.Random()
    categories = sorted(set(enabled), key=lambda c: c.value)
    if not categories:
        return FALLBACK_QUERY

    category = rng.choice(categories)
    template = rng.choice(TEMPLATES)
    return template.format(
        topic=rng.choice(TOPICS[category]),
        adjective=rng.choice(ADJECTIVES),
        obj=rng.choice(OBJECTS),
        verb=rng.choice(VERB_PHRASES),
        year=year,
    )
