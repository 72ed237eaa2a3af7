"""端点目录。

静态的公共 API 端点列表，按分类和语言标记。
"""

from chaff.endpoints.domain.models import ApiCategory, ApiLanguage, Endpoint

# (纬度, 经度, 城市)
_WEATHER_CITIES = [
    ("51.5074", "-0.1278", "London"),
    ("35.6762", "139.6503", "Tokyo"),
    ("40.7128", "-74.0060", "NYC"),
    ("-33.8688", "151.2093", "Sydney"),
    ("48.8566", "2.3522", "Paris"),
    ("19.4326", "-99.1332", "Mexico City"),
    ("-23.5505", "-46.6333", "São Paulo"),
    ("55.7558", "37.6173", "Moscow"),
    ("1.3521", "103.8198", "Singapore"),
    ("25.2048", "55.2708", "Dubai"),
    ("39.9042", "116.4074", "Beijing"),
    ("28.6139", "77.2090", "New Delhi"),
    ("37.5665", "126.9780", "Seoul"),
    ("52.5200", "13.4050", "Berlin"),
]

_SUBREDDITS = [
    "worldnews", "books", "art", "photography", "cooking", "fitness",
    "gardening", "travel", "sports", "science", "technology", "movies",
]

_MISC_ENDPOINTS = [
    ("https://hacker-news.firebaseio.com/v0/topstories.json", ApiCategory.TECHNOLOGY, "Hacker News"),
    ("https://api.coindesk.com/v1/bpi/currentprice.json", ApiCategory.FINANCE, "Bitcoin price"),
    ("https://api.spacexdata.com/v4/launches/latest", ApiCategory.SCIENCE, "SpaceX launch"),
    ("https://api.github.com/events", ApiCategory.TECHNOLOGY, "GitHub events"),
    ("https://dog.ceo/api/breeds/image/random", ApiCategory.ANIMALS, "Random dog"),
    ("https://catfact.ninja/fact", ApiCategory.ANIMALS, "Cat fact"),
    ("https://www.boredapi.com/api/activity", ApiCategory.ENTERTAINMENT, "Activity suggestion"),
    ("https://api.artic.edu/api/v1/artworks?limit=1", ApiCategory.ART, "Art Institute artwork"),
    ("https://openlibrary.org/search.json?q=fiction&limit=1", ApiCategory.BOOKS, "Fiction books"),
    ("https://www.themealdb.com/api/json/v1/1/random.php", ApiCategory.FOOD, "Random recipe"),
    ("https://www.thesportsdb.com/api/v1/json/3/all_sports.php", ApiCategory.SPORTS, "Sports list"),
    ("https://api.quotable.io/random", ApiCategory.LIFESTYLE, "Random quote"),
]


def build_catalog() -> list[Endpoint]:
    """构建完整的端点目录。

    Returns:
        list[Endpoint]: 所有候选端点，顺序固定
    """
    endpoints: list[Endpoint] = []

    # 各语言的维基百科随机条目
    for language in ApiLanguage:
        endpoints.append(
            Endpoint(
                url=f"https://{language.wikipedia_code}.wikipedia.org/api/rest_v1/page/random/summary",
                category=ApiCategory.WIKIPEDIA,
                language=language,
                description=f"{language.value.capitalize()} Wikipedia article",
            )
        )

    for latitude, longitude, city in _WEATHER_CITIES:
        endpoints.append(
            Endpoint(
                url=(
                    "https://api.open-meteo.com/v1/forecast"
                    f"?latitude={latitude}&longitude={longitude}&current=temperature_2m"
                ),
                category=ApiCategory.WEATHER,
                language=ApiLanguage.ENGLISH,
                description=f"Weather in {city}",
            )
        )

    for sub in _SUBREDDITS:
        endpoints.append(
            Endpoint(
                url=f"https://www.reddit.com/r/{sub}.json?limit=1",
                category=ApiCategory.NEWS,
                language=ApiLanguage.ENGLISH,
                description=f"Reddit r/{sub}",
            )
        )

    for url, category, description in _MISC_ENDPOINTS:
        endpoints.append(
            Endpoint(
                url=url,
                category=category,
                language=ApiLanguage.ENGLISH,
                description=description,
            )
        )

    return endpoints


# 模块加载时构建一次，目录内容不可变
CATALOG: tuple[Endpoint, ...] = tuple(build_catalog())
