"""搜索词生成包。"""

from chaff.search.query_generator import TOPICS, TopicCategory, generate_query

__all__ = ["TOPICS", "TopicCategory", "generate_query"]
