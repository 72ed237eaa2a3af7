"""端点领域模型。

定义端点目录条目（静态、不可变）与端点运行时状态（可变、不持久化）。
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ApiCategory(str, Enum):
    """端点分类枚举。"""

    WIKIPEDIA = "wikipedia"
    WEATHER = "weather"
    NEWS = "news"
    FINANCE = "finance"
    SCIENCE = "science"
    ENTERTAINMENT = "entertainment"
    TECHNOLOGY = "technology"
    LIFESTYLE = "lifestyle"
    ANIMALS = "animals"
    SPORTS = "sports"
    FOOD = "food"
    ART = "art"
    BOOKS = "books"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    ApiCategory.WIKIPEDIA: "Wikipedia",
    ApiCategory.WEATHER: "Weather",
    ApiCategory.NEWS: "News & Social",
    ApiCategory.FINANCE: "Finance & Crypto",
    ApiCategory.SCIENCE: "Science & Space",
    ApiCategory.ENTERTAINMENT: "Entertainment",
    ApiCategory.TECHNOLOGY: "Technology",
    ApiCategory.LIFESTYLE: "Lifestyle & Culture",
    ApiCategory.ANIMALS: "Animals & Nature",
    ApiCategory.SPORTS: "Sports",
    ApiCategory.FOOD: "Food & Recipes",
    ApiCategory.ART: "Art & Museums",
    ApiCategory.BOOKS: "Books & Literature",
}


class ApiLanguage(str, Enum):
    """端点语言枚举。

    值为语言名，``wikipedia_code`` 给出对应的维基百科子域名。
    """

    ENGLISH = "english"
    SPANISH = "spanish"
    FRENCH = "french"
    GERMAN = "german"
    JAPANESE = "japanese"
    CHINESE = "chinese"
    PORTUGUESE = "portuguese"
    ITALIAN = "italian"
    RUSSIAN = "russian"
    ARABIC = "arabic"
    KOREAN = "korean"
    HINDI = "hindi"

    @property
    def wikipedia_code(self) -> str:
        return _WIKIPEDIA_CODES[self]


_WIKIPEDIA_CODES = {
    ApiLanguage.ENGLISH: "en",
    ApiLanguage.SPANISH: "es",
    ApiLanguage.FRENCH: "fr",
    ApiLanguage.GERMAN: "de",
    ApiLanguage.JAPANESE: "ja",
    ApiLanguage.CHINESE: "zh",
    ApiLanguage.PORTUGUESE: "pt",
    ApiLanguage.ITALIAN: "it",
    ApiLanguage.RUSSIAN: "ru",
    ApiLanguage.ARABIC: "ar",
    ApiLanguage.KOREAN: "ko",
    ApiLanguage.HINDI: "hi",
}


class Endpoint(BaseModel):
    """端点目录条目。

    身份与元数据不可变，可作为字典键使用。
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="请求地址")
    category: ApiCategory = Field(..., description="端点分类")
    language: ApiLanguage | None = Field(default=None, description="内容语言（可选）")
    description: str = Field(..., description="端点描述")


class EndpointState(BaseModel):
    """端点运行时状态。

    仅保存在内存中，进程重启后从零开始。
    """

    last_call_time: datetime | None = Field(default=None, description="上次调用时间")
    consecutive_failures: int = Field(default=0, ge=0, description="连续失败次数")
